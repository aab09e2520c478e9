"""Channels, secret bits and integers, Bristol circuit files and AES-128-CTR for secure computation."""

__version__ = "0.1.0"

__all__ = [
    "io_channel",
    "file_io",
    "mem_io",
    "net_io",
    "highspeed_net_io",
    "execution",
    "bit",
    "comparable",
    "integer",
    "circuit_file",
    "aes_ctr",
]