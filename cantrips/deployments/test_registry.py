#!/usr/bin/env python3
"""
Tests for the deploy-everything module registry
"""

import os
import json
import logging
import types
import pytest

from cantrips.deployments.registry import ModuleReference, ModuleRegistry, normalize_module_path
from cantrips.deployments.resolver import ModuleResolver, ResolvedModule
from cantrips.errors import (
    DuplicateModuleError,
    ExternalExecutionError,
    InvalidModuleError,
    RegistryModuleNotFoundError,
    UnresolvableModuleError,
)


class FakeResolver(ModuleResolver):
    """Resolves everything except the paths listed as missing"""

    def __init__(self, missing=()):
        self.missing = set(missing)
        self.calls = []

    def resolve(self, reference, chain_id=None):
        self.calls.append((reference, chain_id))
        if reference.path in self.missing:
            raise UnresolvableModuleError(f"missing {reference.path}", [reference.path])
        return ResolvedModule(reference, reference.path, types.ModuleType("fake"))


class FakeExecutor:
    """Records deployments and fails on the given paths"""

    def __init__(self, failing=(), already=()):
        self.failing = set(failing)
        self.already = set(already)
        self.deployed = []

    def deploy(self, resolved, options):
        if resolved.reference.path in self.failing:
            raise RuntimeError("execution reverted")
        if resolved.reference.path in self.already:
            return False
        self.deployed.append(resolved.reference.path)
        return True


class FakeJournal:
    def __init__(self):
        self.resets = []

    def reset(self, deployment_id):
        self.resets.append(deployment_id)


class FakeOptions:
    deployment_id = "chain-31337"


class TestNormalizeModulePath:
    """Tests for normalize_module_path"""

    def test_relative_internal_path_is_kept(self, tmp_path):
        """Test that a project-relative path is returned unchanged"""
        reference = normalize_module_path("ignition/modules/Token.py", False, str(tmp_path))
        assert reference == ModuleReference("ignition/modules/Token.py", False)

    def test_normalization_is_idempotent(self, tmp_path):
        """Test that normalizing an already normalized path gives the same path"""
        once = normalize_module_path("./ignition//modules/../modules/Token.py", False, str(tmp_path))
        twice = normalize_module_path(once.path, False, str(tmp_path))
        assert once.path == "ignition/modules/Token.py"
        assert twice == once

    def test_absolute_internal_path_is_made_relative(self, tmp_path):
        """Test that the project root prefix is stripped"""
        absolute = os.path.join(str(tmp_path), "ignition", "modules", "Token.py")
        reference = normalize_module_path(absolute, False, str(tmp_path))
        assert reference.path == "ignition/modules/Token.py"
        assert reference.external is False

    def test_internal_path_escaping_root_fails(self, tmp_path):
        """Test that paths outside the project are rejected"""
        with pytest.raises(InvalidModuleError):
            normalize_module_path("../other/Token.py", False, str(tmp_path))
        with pytest.raises(InvalidModuleError):
            normalize_module_path("/definitely/elsewhere/Token.py", False, str(tmp_path))

    def test_project_root_itself_fails(self, tmp_path):
        """Test that the project root is not a module"""
        with pytest.raises(InvalidModuleError):
            normalize_module_path(".", False, str(tmp_path))

    def test_empty_path_fails(self, tmp_path):
        """Test that an empty path is rejected"""
        with pytest.raises(InvalidModuleError):
            normalize_module_path("  ", False, str(tmp_path))

    def test_external_path_is_verbatim(self, tmp_path):
        """Test that external specifiers are stored as given"""
        reference = normalize_module_path("somepkg/ignition/modules/Token.py", True, str(tmp_path))
        assert reference == ModuleReference("somepkg/ignition/modules/Token.py", True)

    def test_external_absolute_path_fails(self, tmp_path):
        """Test that absolute external paths are rejected"""
        with pytest.raises(InvalidModuleError):
            normalize_module_path("/usr/lib/somepkg/Token.py", True, str(tmp_path))

    def test_external_parent_segments_fail(self, tmp_path):
        """Test that external paths cannot climb out of their package"""
        with pytest.raises(InvalidModuleError):
            normalize_module_path("somepkg/../../Token.py", True, str(tmp_path))


class TestModuleRegistry:
    """Tests for ModuleRegistry mutations and persistence"""

    @pytest.fixture(autouse=True)
    def setup(self, tmp_path):
        self.root = str(tmp_path)
        self.resolver = FakeResolver()
        self.registry = ModuleRegistry(self.root, self.resolver)
        self.store = os.path.join(self.root, "ignition", "deploy-everything.json")

    def reload(self):
        return ModuleRegistry(self.root, self.resolver)

    def test_empty_when_store_is_missing(self):
        """Test that a missing store means an empty registry"""
        assert self.registry.list() == []
        assert not os.path.exists(self.store)

    def test_add_then_contains(self):
        """Test that an added module is reported as present"""
        self.registry.add("ignition/modules/A.py")
        assert self.registry.contains("ignition/modules/A.py")
        assert not self.registry.contains("ignition/modules/A.py", external=True)

    def test_add_then_remove_then_contains(self):
        """Test that a removed module is no longer present"""
        self.registry.add("ignition/modules/A.py")
        self.registry.remove("ignition/modules/A.py")
        assert not self.registry.contains("ignition/modules/A.py")
        assert self.reload().list() == []

    def test_add_persists_store_format(self):
        """Test the persisted JSON layout"""
        self.registry.add("ignition/modules/A.py")
        self.registry.add("somepkg/modules/B.py", external=True)

        with open(self.store) as f:
            data = json.load(f)
        assert data == {'contents': [
            {'filename': 'ignition/modules/A.py', 'external': False},
            {'filename': 'somepkg/modules/B.py', 'external': True},
        ]}

    def test_add_resolves_with_chain_id(self):
        """Test that add checks the module through the resolver"""
        self.registry.add("ignition/modules/A.py", chain_id=31337)
        assert self.resolver.calls == [(ModuleReference("ignition/modules/A.py"), 31337)]

    def test_add_unresolvable_does_not_write(self):
        """Test that failing resolution aborts the add"""
        registry = ModuleRegistry(self.root, FakeResolver(missing=["ignition/modules/Typo.py"]))
        with pytest.raises(UnresolvableModuleError):
            registry.add("ignition/modules/Typo.py")
        assert registry.list() == []
        assert not os.path.exists(self.store)

    def test_duplicate_add_fails(self):
        """Test that adding the same pair twice fails and keeps the size"""
        self.registry.add("ignition/modules/A.py")
        with pytest.raises(DuplicateModuleError):
            self.registry.add("ignition/modules/A.py")
        assert len(self.registry.list()) == 1
        assert len(self.reload().list()) == 1

    def test_same_path_internal_and_external_are_distinct(self):
        """Test that (path, external) is the identity"""
        self.registry.add("mods/A.py")
        self.registry.add("mods/A.py", external=True)
        assert len(self.registry.list()) == 2

    def test_remove_missing_fails(self):
        """Test that removing an absent pair fails and keeps the contents"""
        self.registry.add("ignition/modules/A.py")
        with pytest.raises(RegistryModuleNotFoundError):
            self.registry.remove("ignition/modules/B.py")
        with pytest.raises(RegistryModuleNotFoundError):
            self.registry.remove("ignition/modules/A.py", external=True)
        assert self.reload().list() == [ModuleReference("ignition/modules/A.py")]

    def test_list_keeps_insertion_order(self):
        """Test that list returns modules in the order they were added"""
        for name in ["C", "A", "B"]:
            self.registry.add(f"ignition/modules/{name}.py")
        expected = [ModuleReference(f"ignition/modules/{name}.py") for name in ["C", "A", "B"]]
        assert self.registry.list() == expected
        assert self.reload().list() == expected

    def test_corrupt_store_lists_empty(self):
        """Test that invalid JSON is treated as an empty registry"""
        os.makedirs(os.path.dirname(self.store))
        with open(self.store, "w") as f:
            f.write("{not json")
        assert self.registry.list() == []

    def test_store_without_contents_lists_empty(self):
        """Test that a store lacking 'contents' is an empty registry"""
        os.makedirs(os.path.dirname(self.store))
        with open(self.store, "w") as f:
            json.dump({}, f)
        assert self.registry.list() == []

    def test_contains_does_not_write(self):
        """Test that lookups never create the store"""
        assert not self.registry.contains("ignition/modules/A.py")
        self.registry.list()
        assert not os.path.exists(self.store)

    def test_contains_rejects_invalid_path(self):
        """Test that contains still validates the path"""
        with pytest.raises(InvalidModuleError):
            self.registry.contains("../outside.py")

    def test_non_boolean_external_is_corrupt(self):
        """Test that an 'external' flag written as a string is not taken as true"""
        os.makedirs(os.path.dirname(self.store))
        with open(self.store, "w") as f:
            json.dump({'contents': [{'filename': 'A.py', 'external': 'false'}]}, f)
        assert self.registry.list() == []
        assert not self.registry.contains("A.py", external=True)

    def test_missing_external_means_internal(self):
        """Test that entries without 'external' are internal"""
        os.makedirs(os.path.dirname(self.store))
        with open(self.store, "w") as f:
            json.dump({'contents': [{'filename': 'A.py'}]}, f)
        assert self.registry.list() == [ModuleReference("A.py", False)]

    def test_equivalent_external_spellings_warn(self, caplog):
        """Test that adding the same package file under another spelling is warned about"""
        self.registry.add("somepkg/modules/Token.py", external=True)
        with caplog.at_level(logging.WARNING):
            self.registry.add("somepkg.modules.Token", external=True)
            self.registry.add("somepkg/modules/Vault.py", external=True)

        warnings = [r.getMessage() for r in caplog.records if r.levelno == logging.WARNING]
        assert len(warnings) == 1
        assert "somepkg.modules.Token (external)" in warnings[0]
        assert "somepkg/modules/Token.py (external)" in warnings[0]
        assert len(self.registry.list()) == 3


class TestRunAll:
    """Tests for sequential execution of the registered modules"""

    @pytest.fixture(autouse=True)
    def setup(self, tmp_path):
        self.resolver = FakeResolver()
        self.registry = ModuleRegistry(str(tmp_path), self.resolver)
        for name in ["A", "B", "C"]:
            self.registry.add(f"{name}.py")
        self.resolver.calls.clear()

    def test_runs_in_order(self):
        """Test that every module runs in insertion order"""
        executor = FakeExecutor()
        applied = self.registry.run_all(executor, FakeOptions(), chain_id=31337)
        assert executor.deployed == ["A.py", "B.py", "C.py"]
        assert [r.path for r in applied] == ["A.py", "B.py", "C.py"]
        assert all(chain_id == 31337 for _, chain_id in self.resolver.calls)

    def test_stops_at_first_failure(self):
        """Test that a failing module stops the run"""
        executor = FakeExecutor(failing=["B.py"])
        with pytest.raises(ExternalExecutionError) as info:
            self.registry.run_all(executor, FakeOptions())

        assert executor.deployed == ["A.py"]
        assert info.value.reference == ModuleReference("B.py")
        assert info.value.applied == [ModuleReference("A.py")]
        assert isinstance(info.value.__cause__, RuntimeError)

    def test_unresolvable_module_stops_before_running(self):
        """Test that a module which no longer resolves stops the run before any deployment"""
        self.resolver.missing.add("B.py")
        executor = FakeExecutor()
        with pytest.raises(UnresolvableModuleError):
            self.registry.run_all(executor, FakeOptions())
        assert executor.deployed == []

    def test_already_deployed_not_reported_as_applied(self):
        """Test that modules skipped by the executor are left out of the result"""
        executor = FakeExecutor(already=["A.py"])
        applied = self.registry.run_all(executor, FakeOptions())
        assert executor.deployed == ["B.py", "C.py"]
        assert applied == [ModuleReference("B.py"), ModuleReference("C.py")]

    def test_failure_after_skipped_module(self):
        """Test that a skipped module does not count as applied when a later one fails"""
        executor = FakeExecutor(failing=["C.py"], already=["A.py"])
        with pytest.raises(ExternalExecutionError) as info:
            self.registry.run_all(executor, FakeOptions())
        assert info.value.applied == [ModuleReference("B.py")]

    def test_same_module_id_is_rejected(self, tmp_path):
        """Test that two entries with one module id fail before anything runs"""
        registry = ModuleRegistry(str(tmp_path / "other"), FakeResolver())
        registry.add("first.py")
        registry.add("a/Token.py")
        registry.add("b/Token.py")
        executor = FakeExecutor()
        journal = FakeJournal()

        with pytest.raises(InvalidModuleError, match="Token"):
            registry.run_all(executor, FakeOptions(), journal=journal, reset_first=True)
        assert executor.deployed == []
        assert journal.resets == []

    def test_reset_first(self):
        """Test that the journal is reset before anything runs"""
        journal = FakeJournal()
        executor = FakeExecutor(failing=["A.py"])
        with pytest.raises(ExternalExecutionError):
            self.registry.run_all(executor, FakeOptions(), journal=journal, reset_first=True)
        assert journal.resets == ["chain-31337"]

    def test_no_reset_by_default(self):
        """Test that the journal is left alone without reset_first"""
        journal = FakeJournal()
        self.registry.run_all(FakeExecutor(), FakeOptions(), journal=journal)
        assert journal.resets == []


if __name__ == "__main__":
    pytest.main([__file__])
