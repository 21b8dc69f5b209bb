"""Product details handed to the cart by the catalogue."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Product:
    """The part of a catalogue product the cart snapshots when it is added."""

    id: str
    name: str
    price: float
    category: str | None = None
    image: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "Product":
        images = data.get("images") or []
        return cls(
            id=str(data["id"]),
            name=data.get("name", ""),
            price=float(data.get("price") or 0),
            category=data.get("category"),
            image=data.get("image") or (images[0] if images else None),
        )
