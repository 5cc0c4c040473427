"""
Unit tests for hash oracle factory selection and caching.
"""

from __future__ import annotations

import threading

import pytest

from .. import factory
from ..config import BASE_FIELD_MODULUS, REFERENCE_ZERO_HASHES
from ..exceptions import ConfigurationError
from ..feature_flags import set_hash_oracle_name
from ..hashing import Blake2sFieldHasher, HashOracle, Sha256FieldHasher
from ..merkle import clear_zero_hash_cache, zero_hashes

_THIS_MODULE = __name__


class ConstantHasher(HashOracle):
    """Registered from the tests only."""

    name = "constant"

    def apply(self, left, right):
        return 7

    def canonicalize(self, handle):
        return handle % BASE_FIELD_MODULUS


class NotAnOracle:
    pass


class ZeroTablePoseidon(HashOracle):
    """Answers only the empty-subtree pairs, from circomlib's published table."""

    name = "poseidon"

    def apply(self, left, right):
        zeros = REFERENCE_ZERO_HASHES["poseidon"]
        if left != right or left not in zeros[:-1]:
            raise NotImplementedError("only empty subtrees are tabulated")
        return zeros[zeros.index(left) + 1]

    def canonicalize(self, handle):
        return handle


@pytest.fixture(autouse=True)
def reset_factory_state(monkeypatch: pytest.MonkeyPatch) -> None:
    registry = dict(factory.HASH_ORACLE_REGISTRY)
    set_hash_oracle_name(None)
    factory.clear_hash_oracle_cache()
    monkeypatch.delenv("BJJ_MEMBERSHIP_HASH", raising=False)
    yield
    factory.HASH_ORACLE_REGISTRY.clear()
    factory.HASH_ORACLE_REGISTRY.update(registry)
    set_hash_oracle_name(None)
    factory.clear_hash_oracle_cache()


def test_default_oracle_is_sha256() -> None:
    oracle = factory.get_hash_oracle()
    assert isinstance(oracle, Sha256FieldHasher)


def test_env_var_selects_oracle(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BJJ_MEMBERSHIP_HASH", "blake2s")
    assert isinstance(factory.get_hash_oracle(), Blake2sFieldHasher)


def test_prefer_selects_oracle(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BJJ_MEMBERSHIP_HASH", "sha256")
    assert isinstance(factory.get_hash_oracle(prefer="BLAKE2S"), Blake2sFieldHasher)


def test_override_overrides_everything(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BJJ_MEMBERSHIP_HASH", "sha256")
    oracle = factory.get_hash_oracle(prefer="invalid-oracle", override="blake2s")
    assert isinstance(oracle, Blake2sFieldHasher)


def test_invalid_prefer_raises() -> None:
    with pytest.raises(ConfigurationError, match="Invalid hash oracle from prefer"):
        factory.get_hash_oracle(prefer="md5")


def test_invalid_env_raises(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BJJ_MEMBERSHIP_HASH", "poseidon")
    with pytest.raises(ConfigurationError, match="feature flags"):
        factory.get_hash_oracle()


def test_register_hash_oracle() -> None:
    factory.register_hash_oracle(" Constant ", f"{_THIS_MODULE}.ConstantHasher")
    oracle = factory.get_hash_oracle(prefer="constant")
    assert isinstance(oracle, ConstantHasher)
    assert oracle.hash_pair(1, 2) == 7


def test_registered_poseidon_passes_reference_check(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    factory.register_hash_oracle("poseidon", f"{_THIS_MODULE}.ZeroTablePoseidon")
    monkeypatch.setenv("BJJ_MEMBERSHIP_HASH", "poseidon")
    oracle = factory.get_hash_oracle()
    assert isinstance(oracle, ZeroTablePoseidon)

    clear_zero_hash_cache()
    try:
        assert zero_hashes(oracle) == REFERENCE_ZERO_HASHES["poseidon"]
    finally:
        clear_zero_hash_cache()


def test_register_rejects_bad_import_path() -> None:
    with pytest.raises(ValueError, match="Invalid import path"):
        factory.register_hash_oracle("broken", "NoDots")
    with pytest.raises(ValueError, match="Invalid hash oracle name"):
        factory.register_hash_oracle("  ", f"{_THIS_MODULE}.ConstantHasher")


def test_missing_module_raises_import_error() -> None:
    factory.register_hash_oracle("ghost", "nonexistent_pkg.hashing.GhostHasher")
    with pytest.raises(ImportError, match="Unable to import"):
        factory.get_hash_oracle(prefer="ghost")


def test_missing_class_raises_import_error() -> None:
    factory.register_hash_oracle("ghost", f"{_THIS_MODULE}.GhostHasher")
    with pytest.raises(ImportError, match="not found"):
        factory.get_hash_oracle(prefer="ghost")


def test_non_oracle_class_raises_type_error() -> None:
    factory.register_hash_oracle("plain", f"{_THIS_MODULE}.NotAnOracle")
    with pytest.raises(TypeError, match="does not implement HashOracle"):
        factory.get_hash_oracle(prefer="plain")


class TestCachedOracle:
    """Test the shared default oracle."""

    def test_cached_instance_is_reused(self) -> None:
        assert factory.get_cached_hash_oracle() is factory.get_cached_hash_oracle()

    def test_clear_rebuilds(self) -> None:
        first = factory.get_cached_hash_oracle()
        factory.clear_hash_oracle_cache()
        assert factory.get_cached_hash_oracle() is not first

    def test_concurrent_first_use_builds_once(self) -> None:
        results = []

        def worker():
            results.append(factory.get_cached_hash_oracle())

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len({id(oracle) for oracle in results}) == 1
