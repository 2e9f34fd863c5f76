import math
import unittest

from Calculus.evaluator import evaluate
from Calculus.expression import (
    Add, Cos, Ln, Multiply, Number, Power, Sin, Subtract, Variable,
)
from Calculus.point import Point
from Calculus.simplifier import Simplifier, simplify


class TestSimplifier(unittest.TestCase):

    def test_identities(self):
        self.assertEqual(simplify(Add(Multiply(1, 0), Multiply(0, 1))), Number(0))
        self.assertEqual(simplify(Power('x', 1)), Variable('x'))
        self.assertEqual(simplify(Multiply(2, Power('x', 1))), Multiply(2, 'x'))
        self.assertEqual(simplify(Multiply(5, Add(Multiply('x', 0), Multiply(1, 'y')))), Multiply(5, 'y'))
        self.assertEqual(
            simplify(Add(Multiply(5, Add(Multiply('x', 0), Multiply(1, 'y'))), Multiply(0, Multiply('x', 'y')))),
            Multiply(5, 'y'),
        )
        self.assertEqual(simplify(Add(Multiply(0, 'x'), Multiply(1, 2))), Number(2))

    def test_constant_folding(self):
        self.assertEqual(simplify(Add(1, 2, 3)), Number(6))
        self.assertEqual(simplify(Subtract(5, 7)), Number(-2))
        self.assertEqual(simplify(Power(2, 10)), Number(1024))
        self.assertEqual(simplify(Ln(1)), Number(0))
        self.assertEqual(simplify(Cos(0)), Number(1))
        self.assertAlmostEqual(simplify(Ln(4)).value, math.log(4))

    def test_partial_constant_collapse(self):
        self.assertEqual(simplify(Multiply(1, 5, 'y')), Multiply(5, 'y'))
        self.assertEqual(simplify(Multiply(2, 5, 'y')), Multiply(10, 'y'))
        self.assertEqual(simplify(Multiply('x', 2, 'y', 3)), Multiply(6, 'x', 'y'))
        self.assertEqual(simplify(Add('x', 2, 'y', -2)), Add('x', 'y'))
        self.assertEqual(simplify(Add('x', 2, 'y', 3)), Add(5, 'x', 'y'))

    def test_single_constant_keeps_position(self):
        self.assertEqual(simplify(Multiply('x', 8)), Multiply('x', 8))

    def test_zero_operands(self):
        self.assertEqual(simplify(Add('a', 'b', 0, 'c', 0)), Add('a', 'b', 'c'))
        self.assertEqual(simplify(Multiply(Ln('z'), 0)), Number(0))
        self.assertEqual(simplify(Multiply(Multiply(Ln('z'), 0), 2)), Number(0))
        self.assertEqual(simplify(Multiply(Multiply(Power('z', 5), Ln('z'), 0), 2)), Number(0))

    def test_flattening(self):
        self.assertEqual(simplify(Add('a', Add('b', 'c'))), Add('a', 'b', 'c'))
        self.assertEqual(simplify(Multiply(Multiply('a', 'b'), Multiply('c', 'd'))), Multiply('a', 'b', 'c', 'd'))
        self.assertEqual(simplify(Add('a', Multiply('b', 'c'))), Add('a', Multiply('b', 'c')))

    def test_flattening_does_not_cross_subtract(self):
        node = Subtract(Subtract('a', 'b'), 'c')
        self.assertEqual(simplify(node), node)
        self.assertEqual(simplify(Subtract('a', 0)), Variable('a'))

    def test_power_rules(self):
        self.assertEqual(simplify(Power('x', 0)), Number(1))
        self.assertEqual(simplify(Power(1, 'x')), Number(1))
        self.assertEqual(simplify(Power(0, 0)), Number(1))
        self.assertEqual(simplify(Power(Add('x', 0), Subtract(3, 2))), Variable('x'))

    def test_nested_cleanup(self):
        node = Add(
            Multiply(2, Power('x', 1)),
            Add(Multiply(0, Power('z', 5)), Multiply(Multiply(Power('z', 5), Ln('z'), 0), 2)),
            0,
            Add(Multiply(0, Power('x', -1)), Multiply(Multiply(-1, Power('x', -2)), 18)),
            0,
        )
        self.assertEqual(simplify(node), Add(Multiply(2, 'x'), Multiply(-18, Power('x', -2))))

    def test_idempotent(self):
        nodes = [
            Add(Multiply(2, 'x', 1), Add('y', 3, Add(4, 'z'))),
            Multiply(Add('x', 0), Multiply(Power('y', 1), 2, 3)),
            Power(Multiply(1, Sin('x')), Add(0, Cos('x'))),
            Subtract(Add(1, 'x', 2), Multiply(0, 'y')),
        ]
        for node in nodes:
            with self.subTest(node=node):
                once = simplify(node)
                self.assertEqual(simplify(once), once)

    def test_value_preserving(self):
        point = Point('x 1.5 y -2 z 0.25')
        nodes = [
            Add(Multiply(2, 'x', 1), Add('y', 3, Add(4, 'z'))),
            Multiply(Add('x', 0), Multiply(Power('y', 1), 2, 3)),
            Power(Multiply(1, Sin('x')), Add(0, Cos('x'))),
            Subtract(Add(1, 'x', 2), Multiply(0, 'y')),
            Multiply(Ln(Add('x', 'z')), Power('e', 'y'), 'pi'),
        ]
        for node in nodes:
            with self.subTest(node=node):
                self.assertAlmostEqual(evaluate(simplify(node), point), evaluate(node, point))

    def test_result_is_a_new_tree(self):
        leaf = Variable('x')
        result = simplify(Add(leaf, 0))
        self.assertEqual(result, leaf)
        self.assertIsNot(result, leaf)

    def test_shared_input_gives_separate_nodes(self):
        shared = Multiply(Sin('x'), 1)
        result = Simplifier().run(Add(shared, shared))
        self.assertEqual(result, Add(Sin('x'), Sin('x')))
        self.assertIsNot(result.operands[0], result.operands[1])


if __name__ == '__main__':
    unittest.main()
