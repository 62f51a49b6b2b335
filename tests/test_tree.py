"""
Tests for the expression tree and the combiner.
"""

import pytest

from backend.logictree import (
    EmptyNodeError,
    InvalidOperatorError,
    Leaf,
    Node,
    Operator,
    apply,
    new_leaf,
    new_node,
)


class TestLeaf:
    """Tests for Leaf."""

    @pytest.mark.parametrize("expr, expected", [
        ("1", "(1)"),
        ("a and b", "(a and b)"),
        ("gt .Toothpaste 5", "(gt .Toothpaste 5)"),
    ])
    def test_wrap_and_combine(self, expr, expected):
        """Test that a leaf combines to its parenthesized expression."""
        assert Leaf.wrap(expr).combine() == expected

    def test_new_leaf_matches_wrap(self):
        """Test the module level shortcut."""
        assert new_leaf("x") == Leaf.wrap("x")

    def test_leaf_op_is_leaf(self):
        """Test that a leaf reports the leaf discriminator."""
        assert new_leaf("x").op is Operator.LEAF

    def test_leaf_is_immutable(self):
        """Test that the stored value cannot be reassigned."""
        leaf = new_leaf("x")
        with pytest.raises(AttributeError):
            leaf.value = "(y)"


class TestOperator:
    """Tests for Operator and apply."""

    def test_values(self):
        """Test canonical lowercase names."""
        assert str(Operator.AND) == "and"
        assert str(Operator.OR) == "or"
        assert Operator.LEAF.value == "leaf"

    def test_parse_known(self):
        """Test lookup by value."""
        assert Operator.parse("and") is Operator.AND
        assert Operator.parse(Operator.OR) is Operator.OR

    def test_parse_unknown(self):
        """Test that unknown values raise a typed error."""
        with pytest.raises(InvalidOperatorError) as exc_info:
            Operator.parse("xor")
        assert exc_info.value.value == "xor"

    def test_apply_empty(self):
        """Test that no expressions give an empty string."""
        assert Operator.AND.apply([]) == ""

    def test_apply_single(self):
        """Test that one expression passes through."""
        assert Operator.OR.apply(["(a)"]) == "(a)"

    def test_apply_pair(self):
        """Test two expressions."""
        assert Operator.AND.apply(["(a)", "(b)"]) == "and ((a)) ((b))"

    def test_apply_right_folds(self):
        """Test that longer lists peel the first element and recurse on the rest."""
        assert Operator.OR.apply(["a", "b", "c"]) == "or (a) (or (b) (c))"
        assert Operator.AND.apply(["a", "b", "c", "d"]) == "and (a) (and (b) (and (c) (d)))"

    def test_apply_many_expressions(self):
        """Test that long expression lists fold without hitting the recursion limit."""
        exprs = [f"(x{i})" for i in range(1200)]
        expected = "".join(f"or ({e}) (" for e in exprs[:-1]) + exprs[-1] + ")" * 1199
        assert Operator.OR.apply(exprs) == expected

    def test_module_apply(self):
        """Test the module level apply accepts string operators."""
        assert apply("or", ["a", "b"]) == "or (a) (b)"

    def test_leaf_does_not_combine(self):
        """Test that leaf is not a combining operator."""
        with pytest.raises(InvalidOperatorError):
            Operator.LEAF.apply(["a", "b"])

    def test_module_apply_unknown(self):
        """Test that apply rejects unknown operators."""
        with pytest.raises(InvalidOperatorError):
            apply("nand", ["a", "b"])


class TestNode:
    """Tests for Node construction and combine."""

    def test_single_child_passes_through(self):
        """Test that an operator over one child is a no-op."""
        child = new_node("or", new_leaf("a"), new_leaf("b"))
        for op in (Operator.AND, Operator.OR):
            assert Node(op, [child]).combine() == child.combine()

    @pytest.mark.parametrize("op", [Operator.AND, Operator.OR])
    def test_two_children(self, op):
        """Test two children."""
        node = Node(op, [new_leaf("a"), new_leaf("b")])
        assert node.combine() == f"{op.value} ((a)) ((b))"

    @pytest.mark.parametrize("count", [3, 4, 5])
    @pytest.mark.parametrize("op", [Operator.AND, Operator.OR])
    def test_right_fold_law(self, op, count):
        """Test that n children combine as the first paired with the rest."""
        leaves = [new_leaf(f"p{i}") for i in range(count)]
        combined = [leaf.combine() for leaf in leaves]

        expected = f"{op.value} ({combined[0]}) ({apply(op, combined[1:])})"
        assert Node(op, leaves).combine() == expected

    def test_three_children_literal(self):
        """Test the exact text for three children."""
        node = new_node("and", new_leaf("gt 1 0"), new_leaf("gt 2 0"), new_leaf("gt 3 0"))
        assert node.combine() == "and ((gt 1 0)) (and ((gt 2 0)) ((gt 3 0)))"

    @pytest.mark.parametrize("op", [Operator.AND, Operator.OR])
    def test_empty_node_fails(self, op):
        """Test that an empty node cannot be combined."""
        with pytest.raises(EmptyNodeError):
            Node(op, []).combine()

    def test_empty_descendant_aborts_whole_tree(self):
        """Test that an empty node anywhere aborts the combination."""
        tree = new_node("or", new_leaf("a"), new_node("and", new_leaf("b"), new_node("or")))
        with pytest.raises(EmptyNodeError):
            tree.combine()

    def test_leaf_operator_rejected(self):
        """Test that a composite node cannot use the leaf tag."""
        with pytest.raises(InvalidOperatorError):
            Node(Operator.LEAF, [new_leaf("a")])

    def test_unknown_operator_rejected(self):
        """Test that unknown operator strings are rejected at construction."""
        with pytest.raises(InvalidOperatorError):
            new_node("xor", new_leaf("a"), new_leaf("b"))

    def test_invalid_child_rejected(self):
        """Test that children must be trees."""
        with pytest.raises(TypeError):
            new_node("and", new_leaf("a"), "(b)")

    def test_children_stored_as_tuple(self):
        """Test that the caller's list is not shared with the node."""
        children = [new_leaf("a"), new_leaf("b")]
        node = Node(Operator.AND, children)
        children.append(new_leaf("c"))
        assert node.children == (new_leaf("a"), new_leaf("b"))

    def test_string_operator_normalized(self):
        """Test that string operators become Operator members."""
        node = new_node("or", new_leaf("a"))
        assert node.op is Operator.OR

    def test_wide_node(self):
        """Test combining a node with over a thousand children."""
        tree = new_node("and", *[new_leaf(f"gt .A {i}") for i in range(1500)])
        combined = tree.combine()
        assert combined.startswith("and ((gt .A 0)) (and ((gt .A 1)) (")
        assert combined.endswith("((gt .A 1498)) ((gt .A 1499))" + ")" * 1498)
        assert combined.count("and (") == 1499

    def test_combine_is_deterministic(self, example_tree):
        """Test that repeated combination yields identical strings."""
        assert example_tree.combine() == example_tree.combine()

    def test_structural_equality(self):
        """Test that equal shapes compare equal."""
        a = new_node("and", new_leaf("x"), new_node("or", new_leaf("y"), new_leaf("z")))
        b = new_node("and", new_leaf("x"), new_node("or", new_leaf("y"), new_leaf("z")))
        assert a == b
        assert a != new_node("or", new_leaf("x"), new_node("or", new_leaf("y"), new_leaf("z")))


class TestWorkedExample:
    """Tests for the milk, onions and toothpaste tree."""

    def test_sub_trees(self, milk_tree, onion_tree):
        """Test the sub-tree expressions."""
        assert milk_tree.combine() == "and ((ge .Milk 4)) ((le .Milk 6))"
        assert onion_tree.combine() == "and ((ge .Onions 1)) ((le .Onions 2))"

    def test_full_expression(self, example_tree, example_expression):
        """Test the full tree expression."""
        assert example_tree.combine() == example_expression

    def test_large_tree(self):
        """Test a wide tree with a nested node at the end."""
        tree = new_node(
            "and",
            new_leaf("gt 1 0"),
            new_leaf("gt 2 0"),
            new_leaf("gt 3 0"),
            new_leaf("gt 4 2"),
            new_node(
                "or",
                new_leaf("gt 1 10"),
                new_leaf("gt 2 10"),
                new_leaf("gt 3 10"),
                new_leaf("gt 40 2"),
            ),
        )
        assert tree.combine() == (
            "and ((gt 1 0)) (and ((gt 2 0)) (and ((gt 3 0)) (and ((gt 4 2)) "
            "(or ((gt 1 10)) (or ((gt 2 10)) (or ((gt 3 10)) ((gt 40 2))))))))"
        )
        assert tree.get_template().execute() == "true"
