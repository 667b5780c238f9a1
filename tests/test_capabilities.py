from __future__ import annotations

from collections import UserList, deque
import importlib.util
import unittest


JAX_AVAILABLE = importlib.util.find_spec("jax") is not None


class _Bag:
    """Iterable, default-constructible, insert-only container."""

    def __init__(self) -> None:
        self.items: list[object] = []

    def __iter__(self):
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def add(self, item: object) -> None:
        self.items.append(item)


class _NeedsCapacity(list):
    def __init__(self, capacity: int, items=()) -> None:
        super().__init__(items)
        self.capacity = capacity


@unittest.skipUnless(JAX_AVAILABLE, "jax is required to import fff_jax")
class CapabilityTests(unittest.TestCase):
    def test_builtin_container_capabilities(self) -> None:
        from fff_jax import Capability, capabilities_of

        cases = {
            "list": ([1], {Capability.END_APPENDABLE, Capability.SIZE_CONSTRUCTIBLE, Capability.SLOT_ASSIGNABLE}),
            "deque": (deque([1]), {Capability.END_APPENDABLE, Capability.SIZE_CONSTRUCTIBLE, Capability.SLOT_ASSIGNABLE}),
            "set": ({1}, {Capability.INSERTABLE, Capability.DEFAULT_CONSTRUCTIBLE}),
            "tuple": ((1,), {Capability.CONCATENABLE, Capability.DEFAULT_CONSTRUCTIBLE}),
            "str": ("ab", {Capability.CONCATENABLE, Capability.DEFAULT_CONSTRUCTIBLE}),
            "user_list": (UserList([1]), {Capability.END_APPENDABLE, Capability.SIZE_CONSTRUCTIBLE}),
        }
        for name, (container, expected) in cases.items():
            with self.subTest(container=name):
                caps = capabilities_of(container)
                self.assertIn(Capability.ITERABLE, caps)
                self.assertIn(Capability.SIZED, caps)
                self.assertTrue(expected <= caps, msg=f"{name}: {sorted(caps)}")

    def test_negative_capabilities(self) -> None:
        from fff_jax import Capability, capabilities_of

        self.assertNotIn(Capability.SLOT_ASSIGNABLE, capabilities_of((1, 2)))
        self.assertNotIn(Capability.SIZE_CONSTRUCTIBLE, capabilities_of({1}))
        self.assertNotIn(Capability.END_APPENDABLE, capabilities_of({1}))
        self.assertNotIn(Capability.INSERTABLE, capabilities_of([1]))
        self.assertNotIn(Capability.ITERABLE, capabilities_of(5))

    def test_user_types_are_detected_structurally(self) -> None:
        from fff_jax import Capability, capabilities_of

        bag = capabilities_of(_Bag())
        self.assertIn(Capability.INSERTABLE, bag)
        self.assertIn(Capability.DEFAULT_CONSTRUCTIBLE, bag)
        self.assertNotIn(Capability.END_APPENDABLE, bag)

        needs = capabilities_of(_NeedsCapacity(4))
        self.assertNotIn(Capability.DEFAULT_CONSTRUCTIBLE, needs)
        self.assertIn(Capability.END_APPENDABLE, needs)

    def test_require_names_missing_capabilities(self) -> None:
        from fff_jax import Capability, CapabilityError, require

        with self.assertRaises(CapabilityError) as ctx:
            require((1, 2), (Capability.ITERABLE, Capability.SLOT_ASSIGNABLE), where="map")
        err = ctx.exception
        self.assertEqual(err.where, "map")
        self.assertEqual(err.missing, ("slot_assignable",))
        self.assertEqual(err.container_type, "tuple")
        self.assertIn("slot_assignable", str(err))
        self.assertIsInstance(err, TypeError)

        require([1], (Capability.ITERABLE, Capability.SIZED), where="noop")

    def test_require_any_prefers_earlier_options(self) -> None:
        from fff_jax.capabilities import APPEND_CAPABILITIES, Capability, require_any
        from fff_jax.errors import CapabilityError

        self.assertIs(require_any([1], APPEND_CAPABILITIES, where="t"), Capability.END_APPENDABLE)
        self.assertIs(require_any({1}, APPEND_CAPABILITIES, where="t"), Capability.INSERTABLE)
        self.assertIs(require_any((1,), APPEND_CAPABILITIES, where="t"), Capability.CONCATENABLE)
        with self.assertRaises(CapabilityError):
            require_any(frozenset({1}), APPEND_CAPABILITIES, where="t")

    def test_capabilities_are_cached_per_type(self) -> None:
        from fff_jax.capabilities import capabilities_of, capability_cache_stats

        capabilities_of([1])
        before = capability_cache_stats()
        capabilities_of([2, 3])
        after = capability_cache_stats()
        self.assertEqual(after["hits"], before["hits"] + 1)
        self.assertEqual(after["misses"], before["misses"])

    def test_jax_arrays(self) -> None:
        import jax.numpy as jnp

        from fff_jax import Capability, capabilities_of

        caps = capabilities_of(jnp.arange(3))
        self.assertIn(Capability.SIZE_CONSTRUCTIBLE, caps)
        self.assertIn(Capability.SLOT_ASSIGNABLE, caps)
        self.assertIn(Capability.CONCATENABLE, caps)
        self.assertNotIn(Capability.END_APPENDABLE, caps)
        self.assertEqual(capabilities_of(jnp.asarray(1)), frozenset())


if __name__ == "__main__":
    unittest.main()
