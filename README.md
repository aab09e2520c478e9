# empcircuit

Building blocks for secure two-party computation over Boolean circuits:
channels that carry bytes between the parties, secret bits and integers
whose operators emit gates, readers for Bristol circuit files, and
AES-128 in counter mode both on plain bytes and inside a circuit.

## Modules

- `empcircuit.io_channel` – `IOChannel`, the base class of every channel.
  It counts the bytes sent (`counter`, `print_counter()`) and offers
  `send_data` / `recv_data`, `send_block` / `recv_block` for 16-byte
  blocks (integers are encoded little-endian) and `send_bool` /
  `recv_bool`, which pack eight booleans to a byte and send any tail one
  byte each. Channels are context managers; leaving the `with` block
  calls `close()`.
- `empcircuit.file_io` – `FileIO(path, read)`, a channel over a file
  opened for reading (`read=True`) or for writing; `flush()`, `reset()`
  (rewind) and `close()`. Reading past the end raises `EOFError`.
- `empcircuit.mem_io` – `MemIO()`, a channel held in memory. Sent data is
  appended and read back in order; `clear()` drops it and
  `load_from_file(channel, size)` replaces it with bytes read from another
  channel. Reading past the end raises `EOFError`.
- `empcircuit.net_io` – `NetIO(address, port, quiet=False)`, a buffered
  channel over one TCP connection. With `address=None` it listens on
  `port` and accepts one peer; otherwise it connects, retrying until the
  peer is up. `sync()`, `flush()`, `set_nodelay()`, `set_delay()`,
  `print_counter()` and `close()`. Output is flushed automatically before
  each receive that follows a send.
- `empcircuit.highspeed_net_io` – `HighSpeedNetIO(address, send_port,
  recv_port, quiet=True, chunk_size=...)`, a channel over two TCP
  connections, one per direction, built from a `SenderSubChannel` and a
  `RecverSubChannel` that move data in fixed-size chunks. Switching
  between sending and receiving flushes the other direction.
- `empcircuit.execution` – the abstract back ends. A `CircuitExecution`
  evaluates gates on wire labels (`and_gate`, `xor_gate`, `not_gate`,
  `public_label`); a `ProtocolExecution` turns a party's inputs into
  labels (`feed`) and opens labels (`reveal`). They are installed with
  `set_circuit_execution` / `set_protocol_execution` (each returns the
  back end it replaces) and read with `get_circuit_execution` /
  `get_protocol_execution`, which raise `RuntimeError` when nothing is
  installed. `PUBLIC` is the party number of public values.
- `empcircuit.bit` – `Bit`, one wire. `&`, `|`, `^`, `~`, `==` and `!=`
  return new `Bit`s; `select(sel, new_value)`, `reveal(party)`,
  `reveal_string(party)` and `Bit.from_label(label)`.
- `empcircuit.comparable` – `Comparable`, a mix-in that derives the six
  comparison operators from `geq` and `equal`, each returning a `Bit`.
- `empcircuit.integer` – `Integer`, fixed-width two's-complement bits,
  least significant first. Built with `from_int`, `from_bytes` or
  `from_bools`; supports `+ - * // %` (division rounds toward zero, the
  remainder takes the dividend's sign), unary `-`, `& | ^`, shifts by an
  `int` or by another `Integer`, signed comparisons, `abs()`,
  `resize(length, signed_extend)`, `mod_exp(p, q)`, `leading_zeros()`,
  `hamming_weight()`, `select(sel, rhs)` and `reveal`, `reveal_signed`,
  `reveal_string`, `reveal_bools`. Indexing past the top returns the top
  bit. Operands must have the same width, else `ValueError`.
- `empcircuit.circuit_file` – `BristolFormat` (two input groups, one
  output group; `to_file(filename, prefix)` writes it out as array
  declarations) and `BristolFashion` (any number of groups), both read with
  `from_text` or `from_file` and evaluated with `compute`. `execute_circuit`
  runs a list of `(in0, in1, out, kind)` gates, the kind being a
  `GateType`.
- `empcircuit.aes_ctr` – `aes_128_ctr(key, iv, data, length, start_chunk)`
  encrypts bytes, or returns key stream when `data` is None;
  `start_chunk` is added to the big-endian low 64 bits of the counter.
  `AES128CTRCalculator(circuit)` encrypts wire labels: `encrypt_labels`
  (secret key and IV), `encrypt_public_iv` (secret key, public IV) and
  `encrypt_public` (public key and IV, key stream fed as a party's input).

## Installation

```
pip install empcircuit
```

To run the tests:

```
pip install "empcircuit[test]"
pytest
```

## Example: in-memory channel

```python
from empcircuit.mem_io import MemIO

io = MemIO()
io.send_data(b"hello")
io.send_bool([True, False, True, True, False, False, True, False, True])
assert io.recv_data(5) == b"hello"
assert io.recv_bool(9) == [True, False, True, True, False, False, True, False, True]
```

## Example: plain AES-128-CTR

```python
from empcircuit.aes_ctr import aes_128_ctr

key = bytes(16)
iv = bytes(16)
ciphertext = aes_128_ctr(key, iv, b"attack at dawn", 14, 0)
assert aes_128_ctr(key, iv, ciphertext, 14, 0) == b"attack at dawn"
```

## Example: integers and circuits on a cleartext back end

Any back end can be installed; this one uses plain booleans as labels,
which is handy for checking circuits.

```python
from empcircuit.circuit_file import BristolFashion
from empcircuit.execution import (
    CircuitExecution, ProtocolExecution,
    set_circuit_execution, set_protocol_execution,
)
from empcircuit.integer import Integer


class Plain(CircuitExecution):
    def and_gate(self, a, b):
        return a and b

    def xor_gate(self, a, b):
        return a != b

    def not_gate(self, a):
        return not a

    def public_label(self, value):
        return bool(value)


class Open(ProtocolExecution):
    def feed(self, party, values):
        return [bool(v) for v in values]

    def reveal(self, party, labels):
        return [bool(x) for x in labels]


set_circuit_execution(Plain())
set_protocol_execution(Open())

a = Integer.from_int(8, 100)
b = Integer.from_int(8, 27)
assert (a + b).reveal() == 127
assert (a // b).reveal() == 3
assert (a >= b).reveal() is True

and_circuit = BristolFashion.from_text("1 3\n2 1 1\n1 1\n2 1 0 1 2 AND\n")
assert and_circuit.compute([True, True]) == [True]
```

## What the package does not do

- It ships no secure back end: there is no garbling scheme, oblivious
  transfer or other two-party protocol implementing `CircuitExecution` or
  `ProtocolExecution`. Those have to be supplied and installed.
- It bundles no AES circuit description. `AES128CTRCalculator` evaluates
  AES in circuit only when given a `BristolFashion` AES-128 circuit
  (256 inputs, 128 outputs); `encrypt_public` works without one.
- There is no floating-point circuit type, no channel transfer of
  elliptic-curve points, and no command-line program.