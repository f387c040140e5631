"""Unit tests for quantity combining and shopping list aggregation."""

from itertools import permutations

import pytest

from recipekit.plan.shopping_list import (
    AggregatedItem,
    PlannedRecipe,
    QuantityCombiner,
    ShoppingQuantity,
    ShoppingListAggregator,
    aggregate_shopping_list,
    categorize_ingredient,
    combine_quantities,
)

# =============================================================================
# Quantity Combining Tests
# =============================================================================


class TestCombineQuantities:
    """Tests for combine_quantities."""

    @pytest.mark.parametrize(
        "existing,incoming,expected",
        [
            ("200 g", "300 g", "500 g"),
            ("200 g", "1 kg", "1.2 kg"),
            ("2 cups", "3 tbsp", "2 cup + 3 tbsp"),
            ("1 cup", "1 cup", "2 cup"),
            ("1/3 cup", "1 tbsp", "6⅓ tbsp"),
            ("1 cup", "1 tsp", "1 cup + 1 tsp"),
            ("1 lb", "8 oz", "1½ lb"),
            ("500 ml", "1 l", "1½ l"),
            ("2 cloves", "1 clove", "3 cloves"),
            ("2", "3", "5"),
            ("1/2 cup", "1/4 cup", "¾ cup"),
        ],
    )
    def test_same_family(self, existing, incoming, expected):
        """Test that amounts of one measurement family are summed."""
        assert combine_quantities(existing, incoming) == expected

    def test_incompatible_units_are_kept_apart(self):
        """Test that cloves and bulbs are listed side by side."""
        assert combine_quantities("2 cloves", "1 bulb", "garlic") == "1 bulb + 2 cloves"

    def test_existing_term_set_absorbs_matching_term(self):
        """Test that a multi-term quantity merges into its matching term."""
        assert combine_quantities("2 cloves + 500 g", "1 clove") == "500 g + 3 cloves"

    def test_text_quantities(self):
        """Test non-numeric quantities."""
        assert combine_quantities("to taste", "to taste") == "to taste"
        assert combine_quantities("to taste", "1 tsp") == "1 tsp + to taste"

    def test_empty_sides(self):
        """Test that an empty side returns the other side."""
        assert combine_quantities("", "2 g") == "2 g"
        assert combine_quantities("2 g", "") == "2 g"
        assert combine_quantities("", "") == ""

    @pytest.mark.parametrize(
        "a,b",
        [
            ("2 cloves", "1 bulb"),
            ("200 g", "1 cup"),
            ("to taste", "1 pinch"),
            ("1 lb", "8 oz"),
            ("200 g", "1 kg"),
            ("2 cups", "3 tbsp"),
        ],
    )
    def test_commutative(self, a, b):
        """Test that the result does not depend on argument order."""
        assert combine_quantities(a, b) == combine_quantities(b, a)

    def test_associative(self):
        """Test that chained combines agree in any grouping and order."""
        amounts = [
            "1 cup", "1 tbsp", "1 tsp", "100 ml", "3 tbsp", "1/3 cup",
            "250 g", "1 kg", "1 lb", "3 oz", "7 g",
        ]
        mismatches = [
            (a, b, c)
            for a, b, c in permutations(amounts, 3)
            if combine_quantities(combine_quantities(a, b), c)
            != combine_quantities(a, combine_quantities(b, c))
        ]
        assert mismatches == []

    def test_grouping_examples(self):
        """Test totals that used to depend on grouping."""
        assert combine_quantities("1 cup + 1 tbsp", "100 ml") == "100 ml + 1 cup + 1 tbsp"
        assert combine_quantities("1 cup", "100 ml + 1 tbsp") == "100 ml + 1 cup + 1 tbsp"
        assert combine_quantities("1 cup + 1 tbsp", "1/3 cup") == "1 cup + 6⅓ tbsp"

    def test_measuring_systems_are_kept_apart(self):
        """Test that metric and US amounts are listed side by side."""
        assert combine_quantities("1 cup", "100 ml") == "100 ml + 1 cup"
        assert combine_quantities("1 lb", "500 g") == "500 g + 1 lb"

    def test_uneven_metric_total_uses_base_unit(self):
        """Test that a kilogram total that is not a round figure stays in grams."""
        assert combine_quantities("1.25 kg", "7 g") == "1257 g"
        assert combine_quantities("1257 g", "3 g") == "1.26 kg"

    def test_rendered_total_reads_back_exactly(self):
        """Test that parsing a rendered total gives the same exact total."""
        combiner = QuantityCombiner()
        total = combiner.parse("1 cup") + combiner.parse("1 tbsp") + combiner.parse("1 lb")
        assert combiner.parse(combiner.render(total)) == total

    def test_shopping_quantity_terms(self):
        """Test the structured terms of an exact total."""
        combiner = QuantityCombiner()
        total = combiner.parse("2 cloves") + combiner.parse("200 g") + ShoppingQuantity()
        assert [(amount.display, unit) for amount, unit in total.terms()] == [
            ("200", "g"),
            ("2", "cloves"),
        ]
        assert not ShoppingQuantity()

    def test_custom_separator(self):
        """Test a combiner with a different separator."""
        combiner = QuantityCombiner(separator=" & ")
        assert combiner.combine("2 cloves", "1 bulb") == "1 bulb & 2 cloves"


# =============================================================================
# Category Tests
# =============================================================================


class TestCategorizeIngredient:
    """Tests for categorize_ingredient."""

    @pytest.mark.parametrize(
        "name,category",
        [
            ("Calabacín", "Produce"),
            ("green peppers", "Produce"),
            ("huevos", "Dairy"),
            ("whole milk", "Dairy"),
            ("chicken breast", "Meat & Seafood"),
            ("olive oil", "Pantry"),
            ("harina", "Pantry"),
            ("xanthan gum", "Other"),
            ("", "Other"),
        ],
    )
    def test_categories(self, name, category):
        """Test English and Spanish keyword categories."""
        assert categorize_ingredient(name) == category


# =============================================================================
# Aggregation Tests
# =============================================================================


class TestShoppingListAggregator:
    """Tests for ShoppingListAggregator."""

    def test_single_plan(self, pancake_plan):
        """Test that headers are skipped and items sorted by category."""
        items = aggregate_shopping_list([pancake_plan])
        assert [(item.name, item.category) for item in items] == [
            ("milk", "Dairy"),
            ("flour", "Pantry"),
            ("salt", "Pantry"),
        ]
        assert items[1].quantity == "200 g"
        assert items[2].quantity == ""
        assert items[1].display == "200 g flour"

    def test_same_recipe_planned_twice(self, pancake_plan, second_pancake_plan):
        """Test that two plans of one recipe double the amounts."""
        plans = [pancake_plan, second_pancake_plan]
        items = {item.name: item for item in aggregate_shopping_list(plans)}
        assert items["flour"].quantity == "400 g"
        assert items["milk"].quantity == "2 cup"
        assert items["flour"].source_recipes == {"Pancakes"}
        assert items["flour"].contributions == {("plan-1", 1), ("plan-2", 1)}

    def test_same_plan_counted_once(self, pancake_plan):
        """Test that a plan passed twice is not double counted."""
        items = {item.name: item for item in aggregate_shopping_list([pancake_plan, pancake_plan])}
        assert items["flour"].quantity == "200 g"

    def test_variant_and_servings(self, pancake_ingredients):
        """Test the selected variant scaled by the servings multiplier."""
        plan = PlannedRecipe(
            plan_id="plan-3",
            recipe_id="recipe-pancakes",
            title="Pancakes",
            ingredients=pancake_ingredients,
            servings_multiplier=2,
            selected_variant=2,
        )
        items = {item.name: item for item in aggregate_shopping_list([plan])}
        assert items["flour"].quantity == "600 g"
        assert items["milk"].quantity == "2 cup"

    def test_alternative_selection(self, pancake_ingredients):
        """Test that a chosen alternative replaces the primary ingredient."""
        plan = PlannedRecipe(
            plan_id="plan-4",
            recipe_id="recipe-pancakes",
            title="Pancakes",
            ingredients=pancake_ingredients,
            alternative_selections={2: True},
        )
        names = {item.name: item for item in aggregate_shopping_list([plan])}
        assert "milk" not in names
        assert names["oat milk"].quantity == "250 ml"
        assert names["oat milk"].category == "Dairy"

    def test_names_merge_case_insensitively(self, make_ingredient):
        """Test that 'Sugar' and 'sugar' become one line."""
        plans = [
            PlannedRecipe("p1", "r1", "Cake", [make_ingredient("Sugar", "100", "g")]),
            PlannedRecipe("p2", "r2", "Cookies", [make_ingredient("sugar", "50", "g")]),
        ]
        items = aggregate_shopping_list(plans)
        assert len(items) == 1
        assert items[0].quantity == "150 g"
        assert items[0].source_recipes == {"Cake", "Cookies"}

    def test_custom_category_order(self, pancake_plan):
        """Test sorting with a different category order."""
        aggregator = ShoppingListAggregator(category_order=("Pantry", "Dairy"))
        items = aggregator.aggregate([pancake_plan])
        assert [item.name for item in items] == ["flour", "salt", "milk"]

    def test_plan_order_does_not_change_totals(self, make_ingredient):
        """Test that every order of the same plans gives the same list."""
        plans = [
            PlannedRecipe(f"p{i}", f"r{i}", f"Recipe {i}", [make_ingredient("milk", amount, unit)])
            for i, (amount, unit) in enumerate(
                [("1", "cup"), ("1", "tbsp"), ("100", "ml"), ("1/3", "cup")]
            )
        ]
        results = {
            tuple((item.name, item.quantity) for item in aggregate_shopping_list(order))
            for order in permutations(plans)
        }
        assert results == {(("milk", "100 ml + 1 cup + 6⅓ tbsp"),)}

    def test_scaled_amounts_stay_exact(self, make_ingredient):
        """Test that thirds of a scaled amount add up without drift."""
        plans = [
            PlannedRecipe(
                f"p{i}", "r1", "Bread", [make_ingredient("flour", "100", "g")],
                servings_multiplier=1 / 3,
            )
            for i in range(3)
        ]
        items = aggregate_shopping_list(plans)
        assert items[0].quantity == "100 g"

    def test_structured_terms(self, pancake_plan):
        """Test the (amount, unit) terms carried by each item."""
        items = {item.name: item for item in aggregate_shopping_list([pancake_plan])}
        assert [(q.display, unit) for q, unit in items["flour"].terms] == [("200", "g")]
        assert items["salt"].terms == []

    def test_empty_plans(self):
        """Test that no plans produce an empty list."""
        assert aggregate_shopping_list([]) == []


class TestMergeIntoExisting:
    """Tests for merging into an existing shopping list."""

    def test_new_plan_is_added(self, pancake_plan, second_pancake_plan):
        """Test that a newly planned recipe adds to the existing amounts."""
        aggregator = ShoppingListAggregator()
        existing = aggregator.aggregate([pancake_plan])
        incoming = aggregator.aggregate([second_pancake_plan])
        merged = aggregator.merge_into_existing(existing, incoming)
        flour = next(item for item in merged if item.name == "flour")
        assert flour.quantity == "400 g"

    def test_regenerating_does_not_double(self, pancake_plan):
        """Test that merging the same contributions again changes nothing."""
        aggregator = ShoppingListAggregator()
        existing = aggregator.aggregate([pancake_plan])
        merged = aggregator.merge_into_existing(existing, aggregator.aggregate([pancake_plan]))
        assert [(item.name, item.quantity) for item in merged] == [
            ("milk", "1 cup"),
            ("flour", "200 g"),
            ("salt", ""),
        ]

    def test_manual_item_is_kept(self, pancake_plan):
        """Test that manually added items survive a merge."""
        aggregator = ShoppingListAggregator()
        manual = AggregatedItem(name="coffee", quantity="1 bag", category="Beverages")
        merged = aggregator.merge_into_existing([manual], aggregator.aggregate([pancake_plan]))
        assert [item.name for item in merged] == ["milk", "coffee", "flour", "salt"]
