"""Tests for recipe data types."""

from recipebook.types import Recipe, RecipeIngredient


def test_recipe_from_dict():
    recipe = Recipe.from_dict(
        {
            "id": 7,
            "title": "Pancakes",
            "ingredients": [
                {"ingredient": "1 cup flour"},
                {"ingredient": "milk", "quantity": "1", "unit": "cup", "notes": ""},
            ],
            "variants": [
                {"id": "v1", "name": "Vegan", "ingredients": [{}, {"ingredient": "oat milk"}]},
            ],
        }
    )

    assert recipe.id == "7"
    assert recipe.ingredients[0] == RecipeIngredient(ingredient="1 cup flour")
    assert recipe.ingredients[1].unit == "cup"
    assert recipe.ingredients[1].notes is None
    assert recipe.variants[0].ingredients[0].ingredient == ""


def test_ingredients_for_without_variant():
    recipe = Recipe(id="r1", title="Soup", ingredients=[RecipeIngredient("2 carrots")])
    assert recipe.ingredients_for() == recipe.ingredients
    assert recipe.ingredients_for("missing") == recipe.ingredients


def test_ingredients_for_variant_override():
    recipe = Recipe.from_dict(
        {
            "id": "r1",
            "title": "Pancakes",
            "ingredients": [{"ingredient": "1 cup flour"}, {"ingredient": "1 cup milk"}],
            "variants": [
                {"id": "v1", "name": "Vegan", "ingredients": [{}, {"ingredient": "1 cup oat milk"}]},
            ],
        }
    )

    names = [i.ingredient for i in recipe.ingredients_for("v1")]
    assert names == ["1 cup flour", "1 cup oat milk"]


def test_get_variant():
    recipe = Recipe.from_dict(
        {"id": "r1", "title": "T", "variants": [{"id": "v1", "name": "Big"}]}
    )
    assert recipe.get_variant("v1").name == "Big"
    assert recipe.get_variant(None) is None
