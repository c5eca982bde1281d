"""Recipe data types shared across recipebook modules."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class RecipeIngredient:
    """One stored ingredient entry of a recipe.

    ``ingredient`` is either the bare name (when quantity/unit are stored
    separately) or a full free-text line such as "2 cups flour, sifted".
    """

    ingredient: str
    quantity: str | None = None
    unit: str | None = None
    notes: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> RecipeIngredient:
        return cls(
            ingredient=data.get("ingredient", "") or "",
            quantity=data.get("quantity") or None,
            unit=data.get("unit") or None,
            notes=data.get("notes") or None,
        )


@dataclass
class RecipeVariant:
    id: str
    name: str
    ingredients: list[RecipeIngredient] = field(default_factory=list)


@dataclass
class Recipe:
    id: str
    title: str
    ingredients: list[RecipeIngredient] = field(default_factory=list)
    variants: list[RecipeVariant] = field(default_factory=list)

    def get_variant(self, variant_id: str | None) -> RecipeVariant | None:
        if variant_id is None:
            return None
        for variant in self.variants:
            if variant.id == variant_id:
                return variant
        return None

    def ingredients_for(self, variant_id: str | None = None) -> list[RecipeIngredient]:
        """Return the ingredient list, with a variant's entries overlaid by position.

        A variant entry replaces the base entry at the same index only when it
        has a non-blank ingredient name.
        """
        variant = self.get_variant(variant_id)
        if variant is None:
            return list(self.ingredients)

        result: list[RecipeIngredient] = []
        for index, base in enumerate(self.ingredients):
            override = (
                variant.ingredients[index]
                if index < len(variant.ingredients)
                else None
            )
            if override is not None and override.ingredient.strip():
                result.append(override)
            else:
                result.append(base)
        return result

    @classmethod
    def from_dict(cls, data: dict) -> Recipe:
        return cls(
            id=str(data["id"]),
            title=data.get("title", ""),
            ingredients=[
                RecipeIngredient.from_dict(i) for i in data.get("ingredients", [])
            ],
            variants=[
                RecipeVariant(
                    id=str(v["id"]),
                    name=v.get("name", ""),
                    ingredients=[
                        RecipeIngredient.from_dict(i)
                        for i in v.get("ingredients", [])
                    ],
                )
                for v in data.get("variants", [])
            ],
        )
