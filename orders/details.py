"""
Order details, stored as a tagged JSON object on ``Order.details``.

    {"kind": "engagement", "quantity": 1000, "link": "https://...", "unit_price": 499}
    {"kind": "digital", "quantity": 1, "unit_price": 1999}

Rows written before the tag existed, or by hand, parse to ``GenericDetails``,
which only exposes scalar key/value pairs.
"""
from __future__ import annotations

from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Tuple, Union


@dataclass(frozen=True)
class EngagementDetails:
    quantity: int
    link: str
    unit_price: int
    kind: str = field(default="engagement", init=False)

    def rows(self) -> List[Tuple[str, str]]:
        return [("Quantity", str(self.quantity)), ("Link", self.link), ("Unit price", str(self.unit_price))]


@dataclass(frozen=True)
class DigitalDetails:
    quantity: int
    unit_price: int
    kind: str = field(default="digital", init=False)

    def rows(self) -> List[Tuple[str, str]]:
        return [("Quantity", str(self.quantity)), ("Unit price", str(self.unit_price))]


@dataclass(frozen=True)
class GenericDetails:
    data: Dict[str, Any]
    kind: str = field(default="generic", init=False)

    def rows(self) -> List[Tuple[str, str]]:
        return [
            (str(k), str(v))
            for k, v in self.data.items()
            if isinstance(v, (str, int, float, bool)) or v is None
        ]


OrderDetails = Union[EngagementDetails, DigitalDetails, GenericDetails]


def to_json(details: OrderDetails) -> Dict[str, Any]:
    if isinstance(details, GenericDetails):
        return dict(details.data)
    return asdict(details)


def _int(v) -> int | None:
    if isinstance(v, bool):
        return None
    if isinstance(v, int):
        return v
    return None


def parse_details(raw: Any) -> OrderDetails:
    if not isinstance(raw, dict):
        return GenericDetails({} if raw is None else {"value": raw})

    kind = raw.get("kind")
    qty, price = _int(raw.get("quantity")), _int(raw.get("unit_price"))
    if kind == "engagement" and qty is not None and price is not None and isinstance(raw.get("link"), str):
        return EngagementDetails(quantity=qty, link=raw["link"], unit_price=price)
    if kind == "digital" and qty is not None and price is not None:
        return DigitalDetails(quantity=qty, unit_price=price)
    return GenericDetails(dict(raw))


def render_details(raw: Any) -> Dict[str, Any]:
    details = parse_details(raw)
    return {"kind": details.kind, "rows": [{"label": k, "value": v} for k, v in details.rows()]}
