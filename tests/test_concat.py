from __future__ import annotations

import importlib.util
import unittest


JAX_AVAILABLE = importlib.util.find_spec("jax") is not None


class _Recorder:
    def __init__(self) -> None:
        self.seen: list[str] = []


RECORD = _Recorder()


def on_int(x: int) -> str:
    RECORD.seen.append("int")
    return f"int:{x}"


def on_str(x: str) -> str:
    RECORD.seen.append("str")
    return f"str:{x}"


def on_float(x: float) -> str:
    RECORD.seen.append("float")
    return f"float:{x}"


def on_pair(x: int, y: int) -> int:
    return x + y


def on_optional(x: int | None) -> str:
    return "optional"


def raises_inside(x: int) -> int:
    raise KeyError("component failure")


class _Scaler:
    def __init__(self, factor: int) -> None:
        self.factor = factor

    def __call__(self, x: int) -> int:
        return x * self.factor


@unittest.skipUnless(JAX_AVAILABLE, "jax is required to import fff_jax")
class ConcatTests(unittest.TestCase):
    def setUp(self) -> None:
        RECORD.seen.clear()

    def test_dispatches_by_argument_type(self) -> None:
        from fff_jax import make_concat

        composite = make_concat(on_int, on_str)
        self.assertEqual(composite(3), "int:3")
        self.assertEqual(RECORD.seen, ["int"])
        self.assertEqual(composite("a"), "str:a")
        self.assertEqual(RECORD.seen, ["int", "str"])

    def test_first_accepting_component_wins(self) -> None:
        from fff_jax import make_concat

        composite = make_concat(on_int, lambda x: "fallback")
        self.assertEqual(composite(1), "int:1")
        self.assertEqual(composite("text"), "fallback")

    def test_dispatches_by_arity(self) -> None:
        from fff_jax import make_concat

        composite = make_concat(on_pair, on_int)
        self.assertEqual(composite(2, 3), 5)
        self.assertEqual(composite(2), "int:2")

    def test_no_accepting_component_raises_before_any_call(self) -> None:
        from fff_jax import NotInvocableError, make_concat

        composite = make_concat(on_int, on_str)
        with self.assertRaises(NotInvocableError):
            composite(1.5)
        with self.assertRaises(TypeError):
            composite([1])
        self.assertEqual(RECORD.seen, [])
        self.assertFalse(composite.accepts(1.5))

    def test_variadic_form_is_a_right_fold(self) -> None:
        from fff_jax import Fconcat, make_concat

        three = make_concat(on_int, on_str, on_float)
        self.assertEqual(three, Fconcat(on_int, Fconcat(on_str, on_float)))
        self.assertEqual(three, make_concat(on_int, make_concat(on_str, on_float)))
        self.assertEqual(three(2.5), "float:2.5")
        self.assertEqual(three("s"), "str:s")
        self.assertEqual(RECORD.seen, ["float", "str"])

    def test_resolve_returns_leaf_component(self) -> None:
        from fff_jax import make_concat

        composite = make_concat(on_int, on_str, on_float)
        self.assertIs(composite.resolve(1.0), on_float)
        self.assertIs(composite.resolve(1), on_int)
        self.assertEqual(RECORD.seen, [])

    def test_union_annotations_and_selectors(self) -> None:
        from fff_jax import identity_at, make_concat

        optional = make_concat(on_optional, on_str)
        self.assertEqual(optional(None), "optional")
        self.assertEqual(optional("x"), "str:x")

        pick = make_concat(identity_at(2), identity_at(0))
        self.assertEqual(pick(1, 2, 3), 3)
        self.assertEqual(pick(1), 1)

    def test_component_errors_propagate(self) -> None:
        from fff_jax import make_concat

        composite = make_concat(raises_inside, on_str)
        with self.assertRaises(KeyError):
            composite(1)

    def test_needs_two_callables(self) -> None:
        from fff_jax import ArityError, NotInvocableError, make_concat

        with self.assertRaises(ArityError):
            make_concat(on_int)
        with self.assertRaises(NotInvocableError):
            make_concat(on_int, 5)

    def test_borrowed_components_see_caller_mutation(self) -> None:
        from fff_jax import make_concat

        scaler = _Scaler(2)
        composite = make_concat(scaler, on_str)
        scaler.factor = 10
        self.assertEqual(composite(3), 30)

    def test_snapshot_components_are_owned(self) -> None:
        from fff_jax import make_concat

        scaler = _Scaler(2)
        composite = make_concat(scaler, on_str, snapshot=True)
        scaler.factor = 10
        self.assertEqual(composite(3), 6)
        self.assertIsNot(composite.first, scaler)


if __name__ == "__main__":
    unittest.main()
