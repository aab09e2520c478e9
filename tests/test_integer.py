import itertools
import math

import pytest

from empcircuit.execution import (
    CircuitExecution,
    ProtocolExecution,
    set_circuit_execution,
    set_protocol_execution,
)
from empcircuit.integer import Integer

WIDTH = 8
MASK = (1 << WIDTH) - 1


class PlainCircuit(CircuitExecution):
    def __init__(self):
        self.ands = 0

    def and_gate(self, a, b):
        self.ands += 1
        return a and b

    def xor_gate(self, a, b):
        return a != b

    def not_gate(self, a):
        return not a

    def public_label(self, value):
        return bool(value)


class RecordingProtocol(ProtocolExecution):
    def __init__(self):
        self.fed = []

    def feed(self, party, values):
        self.fed.append((party, list(values)))
        return [bool(v) for v in values]

    def reveal(self, party, labels):
        return [bool(label) for label in labels]


@pytest.fixture(autouse=True)
def backend():
    circuit = PlainCircuit()
    protocol = RecordingProtocol()
    prev_c = set_circuit_execution(circuit)
    prev_p = set_protocol_execution(protocol)
    yield circuit, protocol
    set_circuit_execution(prev_c)
    set_protocol_execution(prev_p)


def wrap(value, width=WIDTH):
    value &= (1 << width) - 1
    return value - (1 << width) if value >> (width - 1) else value


def num(value, width=WIDTH):
    return Integer.from_int(width, value)


VALUES = [-128, -77, -5, -1, 0, 1, 6, 33, 127]
PAIRS = list(itertools.product(VALUES, repeat=2))


@pytest.mark.parametrize("v", VALUES)
def test_from_int_round_trip(v):
    x = num(v)
    assert x.size() == WIDTH
    assert x.reveal_signed() == v
    assert x.reveal() == v & MASK


def test_reveal_string_is_lsb_first():
    assert num(5, 4).reveal_string() == "1010"


def test_from_bytes_little_endian():
    data = b"\x34\x12"
    assert Integer.from_bytes(16, data).reveal() == int.from_bytes(data, "little")
    assert Integer.from_bytes(4, data).reveal() == data[0] & 0xF


def test_from_bytes_too_short():
    with pytest.raises(ValueError):
        Integer.from_bytes(17, b"\x00\x00")


def test_from_bools_round_trip():
    flags = [True, False, False, True, True]
    assert Integer.from_bools(flags).reveal_bools() == flags


def test_private_input_is_fed(backend):
    _, protocol = backend
    x = Integer.from_int(4, 3, party=2)
    assert protocol.fed == [(2, [True, True, False, False])]
    assert x.reveal() == 3


@pytest.mark.parametrize("a,b", PAIRS)
def test_add_sub_mul(a, b):
    x, y = num(a), num(b)
    assert (x + y).reveal_signed() == wrap(a + b)
    assert (x - y).reveal_signed() == wrap(a - b)
    assert (x * y).reveal_signed() == wrap(a * b)


@pytest.mark.parametrize("a,b", [p for p in PAIRS if p[1] != 0 and p != (-128, -1)])
def test_div_mod_truncate(a, b):
    x, y = num(a), num(b)
    assert (x // y).reveal_signed() == wrap(int(a / b))
    assert (x % y).reveal_signed() == wrap(int(math.fmod(a, b)))


@pytest.mark.parametrize("a,b", PAIRS)
def test_comparisons(a, b):
    x, y = num(a), num(b)
    assert (x >= y).reveal() == (a >= b)
    assert (x < y).reveal() == (a < b)
    assert (x <= y).reveal() == (a <= b)
    assert (x > y).reveal() == (a > b)
    assert (x == y).reveal() == (a == b)
    assert (x != y).reveal() == (a != b)


@pytest.mark.parametrize("a,b", PAIRS)
def test_bitwise(a, b):
    x, y = num(a), num(b)
    assert (x & y).reveal() == (a & b) & MASK
    assert (x | y).reveal() == (a | b) & MASK
    assert (x ^ y).reveal() == (a ^ b) & MASK


@pytest.mark.parametrize("v", VALUES)
def test_neg_and_abs(v):
    assert (-num(v)).reveal_signed() == wrap(-v)
    assert num(v).abs().reveal_signed() == wrap(abs(v))


@pytest.mark.parametrize("v,s", itertools.product([0x5A, 0xFF, 0x81], range(WIDTH + 2)))
def test_constant_shifts(v, s):
    x = num(v)
    assert (x << s).reveal() == (v << s) & MASK
    assert (x >> s).reveal() == (v & MASK) >> s


@pytest.mark.parametrize("v,s", itertools.product([0x5A, 0xC3], range(WIDTH)))
def test_secret_shifts(v, s):
    x, amount = num(v), num(s)
    assert (x << amount).reveal() == (v << s) & MASK
    assert (x >> amount).reveal() == (v & MASK) >> s


@pytest.mark.parametrize("s", [False, True])
def test_select(s):
    x, y = num(17), num(-9)
    chosen = x.select(Integer.from_bools([s])[0], y)
    assert chosen.reveal_signed() == (-9 if s else 17)


def test_resize_sign_and_zero_extension():
    assert num(-3).resize(16, True).reveal_signed() == -3
    assert num(-3).resize(16, False).reveal() == -3 & MASK
    truncated = num(0x1F).resize(4)
    assert truncated.size() == 4
    assert truncated.reveal() == 0xF


def test_index_clamps_to_last_bit():
    x = num(-1 & 0x7F)
    assert x[100].reveal() == x[WIDTH - 1].reveal()
    assert len(list(x)) == WIDTH


@pytest.mark.parametrize("v", [0, 1, 2, 0x16, 0x7F, 0x80, 0xFF])
def test_hamming_weight_and_leading_zeros(v):
    x = num(v)
    assert x.hamming_weight().reveal() == bin(v).count("1")
    assert x.leading_zeros().reveal() == WIDTH - v.bit_length()


@pytest.mark.parametrize("base,exp,mod", [(3, 5, 7), (2, 10, 11), (5, 3, 13), (4, 0, 7)])
def test_mod_exp(base, exp, mod):
    result = num(base, 16).mod_exp(num(exp, 16), num(mod, 16))
    assert result.reveal() == pow(base, exp, mod)


def test_size_mismatch_raises():
    with pytest.raises(ValueError):
        num(1, 8) + num(1, 4)


def test_hamming_weight_of_empty_raises():
    with pytest.raises(ValueError):
        Integer().hamming_weight()


def test_add_gate_count(backend):
    circuit, _ = backend
    x, y = num(3), num(4)
    circuit.ands = 0
    x + y
    assert circuit.ands == WIDTH - 1


def test_unhashable():
    with pytest.raises(TypeError):
        hash(num(1))