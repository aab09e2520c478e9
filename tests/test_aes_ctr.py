import pytest

from empcircuit.aes_ctr import AES128CTRCalculator, aes_128_ctr
from empcircuit.circuit_file import BristolFashion, GateType
from empcircuit.execution import (
    CircuitExecution,
    ProtocolExecution,
    set_circuit_execution,
    set_protocol_execution,
)
from empcircuit.integer import Integer


class PlainCircuit(CircuitExecution):
    def and_gate(self, a, b):
        return bool(a) and bool(b)

    def xor_gate(self, a, b):
        return bool(a) != bool(b)

    def not_gate(self, a):
        return not a

    def public_label(self, value):
        return bool(value)


class PlainProtocol(ProtocolExecution):
    def feed(self, party, values):
        return [bool(v) for v in values]

    def reveal(self, party, labels):
        return [bool(label) for label in labels]


@pytest.fixture(autouse=True)
def plain_backend():
    prev_c = set_circuit_execution(PlainCircuit())
    prev_p = set_protocol_execution(PlainProtocol())
    yield
    set_circuit_execution(prev_c)
    set_protocol_execution(prev_p)


KEY = bytes.fromhex("2b7e151628aed2a6abf7158809cf4f3c")
CTR = bytes.fromhex("f0f1f2f3f4f5f6f7f8f9fafbfcfdfeff")
PLAIN1 = bytes.fromhex("6bc1bee22e409f96e93d7e117393172a")
PLAIN2 = bytes.fromhex("ae2d8a571e03ac9c9eb76fac45af8e51")
CIPHER1 = bytes.fromhex("874d6191b620e3261bef6864990db6ce")
CIPHER2 = bytes.fromhex("9806f66b7970fdff8617187bb9fffdff")

IV = bytes(15) + b"\x05"
IV_NEXT = bytes(15) + b"\x06"
ZERO_KEY = [False] * 128


def bits(data):
    return [bit.label for bit in Integer.from_bytes(8 * len(data), data)]


def xor_circuit():
    gates = [(j, 128 + j, 256 + j, GateType.XOR) for j in range(128)]
    return BristolFashion(num_wire=384, num_input=256, num_output=128, gates=gates)


def test_known_vector_two_blocks():
    assert aes_128_ctr(KEY, CTR, PLAIN1 + PLAIN2) == CIPHER1 + CIPHER2


def test_start_chunk_skips_blocks():
    assert aes_128_ctr(KEY, CTR, PLAIN2, start_chunk=1) == CIPHER2


def test_round_trip_bytes():
    message = b"attack at dawn, bring snacks"
    assert aes_128_ctr(KEY, IV, aes_128_ctr(KEY, IV, message)) == message


def test_blind_is_encryption_of_zeros():
    assert aes_128_ctr(KEY, IV, None, 32) == aes_128_ctr(KEY, IV, bytes(32))


def test_keystream_offsets_agree():
    stream = aes_128_ctr(KEY, IV, None, 64)
    assert aes_128_ctr(KEY, IV, None, 48, start_chunk=1) == stream[16:]


def test_length_truncates_data():
    assert aes_128_ctr(KEY, CTR, PLAIN1, length=5) == CIPHER1[:5]


def test_argument_errors():
    with pytest.raises(ValueError):
        aes_128_ctr(KEY, IV)
    with pytest.raises(ValueError):
        aes_128_ctr(KEY, IV, b"abc", length=4)
    with pytest.raises(ValueError):
        aes_128_ctr(KEY[:8], IV, b"abc")


def test_reverse_bytes_is_an_involution():
    mapped = [AES128CTRCalculator.reverse_bytes(i) for i in range(128)]
    assert sorted(mapped) == list(range(128))
    assert all(AES128CTRCalculator.reverse_bytes(m) == i for i, m in enumerate(mapped))


def test_zero_key_blind_is_iv():
    calc = AES128CTRCalculator(xor_circuit())
    assert calc.encrypt_labels(ZERO_KEY, bits(IV)) == bits(IV)


def test_in_circuit_counter_increment():
    calc = AES128CTRCalculator(xor_circuit())
    assert calc.encrypt_labels(ZERO_KEY, bits(IV), start_chunk=1) == bits(IV_NEXT)


def test_long_blind_spans_chunks():
    calc = AES128CTRCalculator(xor_circuit())
    out = calc.encrypt_labels(ZERO_KEY, bits(IV), length=200)
    assert len(out) == 200
    assert out[:128] == bits(IV)
    assert out[128:] == bits(IV_NEXT)[:72]


def test_label_round_trip():
    calc = AES128CTRCalculator(xor_circuit())
    key = bits(KEY)
    data = bits(b"sixteen byte msg" * 2)
    encrypted = calc.encrypt_labels(key, bits(CTR), data)
    assert encrypted != data
    assert calc.encrypt_labels(key, bits(CTR), encrypted) == data


def test_key_is_remembered():
    calc = AES128CTRCalculator(xor_circuit())
    first = calc.encrypt_labels(bits(KEY), bits(IV))
    assert calc.encrypt_labels(None, bits(IV)) == first


def test_missing_key_rejected():
    calc = AES128CTRCalculator(xor_circuit())
    with pytest.raises(ValueError):
        calc.encrypt_labels(None, bits(IV))


def test_public_iv_matches_counter_sequence():
    calc = AES128CTRCalculator(xor_circuit())
    assert calc.encrypt_public_iv(ZERO_KEY, IV, length=256) == bits(IV) + bits(IV_NEXT)


def test_public_iv_start_chunk():
    calc = AES128CTRCalculator(xor_circuit())
    assert calc.encrypt_public_iv(ZERO_KEY, IV, start_chunk=1) == bits(IV_NEXT)


def test_encrypt_public_matches_byte_stream():
    calc = AES128CTRCalculator()
    stream = aes_128_ctr(KEY, CTR, None, 16)
    assert calc.encrypt_public(KEY, CTR) == bits(stream)
    assert calc.encrypt_public(KEY, CTR, length=12) == bits(stream)[:12]


def test_encrypt_public_round_trip():
    calc = AES128CTRCalculator()
    data = bits(PLAIN1)
    encrypted = calc.encrypt_public(KEY, CTR, data)
    assert encrypted == bits(CIPHER1)
    assert calc.encrypt_public(KEY, CTR, encrypted) == data


def test_circuit_shape_checked():
    wrong = BristolFashion(num_wire=3, num_input=2, num_output=1, gates=[(0, 1, 2, 0)])
    with pytest.raises(ValueError):
        AES128CTRCalculator(wrong)


def test_labels_need_a_circuit():
    with pytest.raises(RuntimeError):
        AES128CTRCalculator().encrypt_labels(ZERO_KEY, bits(IV))


def test_iv_width_checked():
    calc = AES128CTRCalculator(xor_circuit())
    with pytest.raises(ValueError):
        calc.encrypt_labels(ZERO_KEY, bits(IV)[:64])