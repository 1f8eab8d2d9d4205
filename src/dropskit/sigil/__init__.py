"""
Sigil - Keys, signatures and wallet plugins for dropskit.

Uses cryptography for ECDSA signing over secp256k1 and eth-keys for
public key recovery.
"""
