"""Known Antelope networks."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ChainDefinition:
    id: str
    url: str
    name: str = ""

    @property
    def id_bytes(self) -> bytes:
        return bytes.fromhex(self.id)


class Chains:
    EOS = ChainDefinition(
        id="aca376f206b8fc25a6ed44dbdc66547c36c6c33e3a119ffbeaef943642f0e906",
        url="https://eos.greymass.com",
        name="EOS",
    )
    Jungle4 = ChainDefinition(
        id="73e4385a2708e6d7048834fbc1079f2fabb17b3c125b146af438971e90716c4d",
        url="https://jungle4.greymass.com",
        name="Jungle 4 (Testnet)",
    )
