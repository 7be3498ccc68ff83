"""Storefront cart and the WhatsApp checkout message."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional
from urllib.parse import quote

from .config import settings
from .models import CatalogItem

logger = logging.getLogger(__name__)

WHATSAPP_BASE_URL = "https://wa.me"
# Characters encodeURIComponent leaves alone.
_URI_COMPONENT_SAFE = "-_.!~*'()"
_KEYCAP = "\ufe0f\u20e3"


@dataclass
class CartLine:
    id: Any
    name: str
    price: float
    quantity: int = 1

    @property
    def subtotal(self) -> float:
        return self.price * self.quantity


class Cart:
    def __init__(self) -> None:
        self._lines: Dict[Any, CartLine] = {}

    @property
    def lines(self) -> List[CartLine]:
        return list(self._lines.values())

    def __len__(self) -> int:
        return len(self._lines)

    def __contains__(self, dish_id: object) -> bool:
        return dish_id in self._lines

    def quantity_of(self, dish_id: Any) -> int:
        line = self._lines.get(dish_id)
        return line.quantity if line else 0

    def add(self, dish: CatalogItem, quantity: int = 1) -> CartLine:
        """Add ``quantity`` of ``dish``, merging with an existing line."""
        line = self._lines.get(dish.id)
        if line is None:
            line = CartLine(id=dish.id, name=dish.name, price=dish.price, quantity=0)
            self._lines[dish.id] = line
        line.quantity += quantity
        if line.quantity <= 0:
            del self._lines[dish.id]
        return line

    def remove(self, dish_id: Any) -> None:
        """Take one away; the line disappears when its last unit goes."""
        line = self._lines.get(dish_id)
        if line is None:
            return
        if line.quantity > 1:
            line.quantity -= 1
        else:
            del self._lines[dish_id]

    def delete(self, dish_id: Any) -> None:
        self._lines.pop(dish_id, None)

    def update(self, dish_id: Any, **fields: Any) -> Optional[CartLine]:
        line = self._lines.get(dish_id)
        if line is None:
            return None
        for key, value in fields.items():
            if not hasattr(line, key) or key == "id":
                raise AttributeError(f"CartLine has no editable field {key!r}")
            setattr(line, key, value)
        return line

    def clear(self) -> None:
        self._lines.clear()

    @property
    def total_amount(self) -> float:
        return sum(line.subtotal for line in self._lines.values())

    @property
    def total_items(self) -> int:
        return sum(line.quantity for line in self._lines.values())

    def order_message(self, name: str, address: str) -> str:
        if not name.strip() or not address.strip():
            raise ValueError("Both name and delivery address are required")
        details = "\n".join(
            f"{index}{_KEYCAP} {line.name} - {line.quantity} {'Pieces' if line.quantity > 1 else 'Piece'}"
            for index, line in enumerate(self._lines.values(), start=1)
        )
        return (
            "Hello, I’d like to place an order:\n\n"
            f"\U0001f6d2 Order Details:\n{details}\n\n"
            f"\U0001f4b0 Total Amount: ₹{self.total_amount:.2f}\n\n"
            f"\U0001f4cd Delivery Address: {address}\n"
            f"\U0001f464 Name: {name}\n\n"
            f"Helpline No: {settings.helpline_number}"
        )

    def whatsapp_url(self, name: str, address: str, phone: Optional[str] = None) -> str:
        message = self.order_message(name, address)
        target = phone or settings.whatsapp_phone
        logger.info("Checkout for %s with %s items, total %.2f", name, self.total_items, self.total_amount)
        return f"{WHATSAPP_BASE_URL}/{target}?text={quote(message, safe=_URI_COMPONENT_SAFE)}"
