# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Ed25519 keypairs bound into the assembler session (legacy `--gen-key` / `--set-key`).

File format (pinned):
- secret file: 64 raw bytes, the 32-byte private seed followed by the 32-byte public key,
- public file: 32 raw bytes of the public key.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey

from sold.errors import IOFailure

SEED_SIZE = 32
PUBLIC_SIZE = 32


def ed25519_public_bytes_raw(pubkey) -> bytes:
	return pubkey.public_bytes(
		encoding=serialization.Encoding.Raw,
		format=serialization.PublicFormat.Raw,
	)


@dataclass(frozen=True)
class Keypair:
	seed: bytes
	public: bytes

	@classmethod
	def from_seed(cls, seed: bytes) -> "Keypair":
		if len(seed) != SEED_SIZE:
			raise ValueError("ed25519 private key seed must be 32 bytes")
		priv = Ed25519PrivateKey.from_private_bytes(seed)
		return cls(seed=seed, public=ed25519_public_bytes_raw(priv.public_key()))

	@classmethod
	def generate(cls) -> "Keypair":
		return cls.from_seed(os.urandom(SEED_SIZE))

	@property
	def secret(self) -> bytes:
		return self.seed + self.public


def store_secret(pair: Keypair, path: Path) -> None:
	path.write_bytes(pair.secret)


def store_public(pair: Keypair, path: Path) -> None:
	path.write_bytes(pair.public)


def generate_keypair(path: Path) -> Keypair:
	"""Generate a keypair and persist it as `path` (secret) and `path.pub` (public)."""
	pair = Keypair.generate()
	try:
		store_public(pair, Path(str(path) + ".pub"))
		store_secret(pair, path)
	except OSError as err:
		raise IOFailure(message=f"Failed to store keypair: {err}") from err
	return pair


def load_keypair(path: Path) -> Keypair:
	"""Load a keypair from a secret file; the stored public half must match the seed."""
	try:
		raw = path.read_bytes()
	except OSError as err:
		raise IOFailure(message=f"Failed to read keypair: {err}") from err
	if len(raw) != SEED_SIZE + PUBLIC_SIZE:
		raise IOFailure(message="Failed to read keypair")
	pair = Keypair.from_seed(raw[:SEED_SIZE])
	if pair.public != raw[SEED_SIZE:]:
		raise IOFailure(message="Failed to read keypair: public key does not match the secret")
	return pair


__all__ = ["Keypair", "generate_keypair", "load_keypair", "store_public", "store_secret"]
