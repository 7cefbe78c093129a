#!/usr/bin/env python3
"""
Tests for the deployment journal, the web3 executor, registry runs and deployed contract lookup
"""

import os
import json
import types
import pytest
from unittest.mock import MagicMock, patch

from cantrips.deployments.deployed import get_deployed_contract, select_deployed_contract
from cantrips.deployments.executor import DeploymentOptions, ModuleDeployment, Web3Executor
from cantrips.deployments.journal import DeploymentJournal
from cantrips.deployments.registry import ModuleReference, ModuleRegistry
from cantrips.deployments.resolver import FileModuleResolver, ResolvedModule
from cantrips.errors import (
    CantripsError,
    DeploymentLookupError,
    InvalidInputError,
    InvalidModuleError,
    NonInteractiveError,
)
from cantrips.utils.accounts import Signer

ALICE = "0x" + "a" * 40
BOB = "0x" + "b" * 40
ABI = [{'type': 'function', 'name': 'owner', 'inputs': [], 'outputs': [], 'stateMutability': 'view'}]


def make_context(tmp_path, signers=None):
    context = MagicMock()
    context.deployments_path = str(tmp_path / "ignition" / "deployments")
    context.artifacts_path = str(tmp_path / "artifacts")
    context.get_signers.return_value = signers if signers is not None else [Signer(ALICE), Signer(BOB)]
    context.get_chain_id.return_value = 31337
    context.settings.gas_limit = 3000000
    w3 = context.get_web3.return_value
    w3.to_checksum_address.side_effect = lambda address: address
    return context


def make_module(name, deploy=None):
    module = types.ModuleType(name)
    if deploy is not None:
        module.deploy = deploy
    return ResolvedModule(ModuleReference(f"ignition/modules/{name}.py"), f"/tmp/{name}.py", module)


class TestDeploymentJournal:

    @pytest.fixture(autouse=True)
    def setup(self, tmp_path):
        self.path = str(tmp_path / "deployments")
        self.journal = DeploymentJournal(self.path)

    def test_record_module(self):
        """Test that addresses, ABIs and completion are recorded"""
        self.journal.record_module("chain-1", "Token", {'MyToken': {'address': ALICE, 'abi': ABI}})

        assert self.journal.deployed_addresses("chain-1") == {'Token#MyToken': ALICE}
        assert self.journal.contract_abi("chain-1", "Token#MyToken") == ABI
        assert self.journal.is_complete("chain-1", "Token")
        assert not self.journal.is_complete("chain-2", "Token")

    def test_record_merges_addresses(self):
        """Test that later modules add to the recorded addresses"""
        self.journal.record_module("chain-1", "A", {'X': {'address': ALICE, 'abi': ABI}})
        self.journal.record_module("chain-1", "B", {'Y': {'address': BOB, 'abi': ABI}})
        assert self.journal.deployed_addresses("chain-1") == {'A#X': ALICE, 'B#Y': BOB}
        assert self.journal.completed_modules("chain-1") == ["A", "B"]

    def test_reset_deletes_directory(self):
        """Test that reset wipes only the addressed deployment"""
        self.journal.record_module("chain-1", "A", {})
        self.journal.record_module("chain-2", "A", {})
        self.journal.reset("chain-1")

        assert not os.path.exists(os.path.join(self.path, "chain-1"))
        assert self.journal.completed_modules("chain-1") == []
        assert self.journal.is_complete("chain-2", "A")

    def test_reset_without_state(self):
        """Test that resetting an unknown deployment is harmless"""
        self.journal.reset("chain-404")

    def test_invalid_deployment_id(self):
        """Test that deployment ids cannot point outside the journal"""
        with pytest.raises(DeploymentLookupError):
            self.journal.reset("../chain-1")
        with pytest.raises(DeploymentLookupError):
            self.journal.deployed_addresses("")


class TestWeb3Executor:

    @pytest.fixture(autouse=True)
    def setup(self, tmp_path):
        self.context = make_context(tmp_path)
        self.journal = DeploymentJournal(self.context.deployments_path)
        self.executor = Web3Executor(self.context, self.journal)
        self.options = DeploymentOptions(deployment_id="chain-31337", parameters={'Token': {'supply': 7}})

    def test_deploy_runs_module_and_records(self):
        """Test that deploy(m) runs and its contracts are journaled"""
        seen = {}

        def deploy(m):
            seen['supply'] = m.parameter("supply")
            seen['missing'] = m.parameter("missing", 3)
            seen['sender'] = m.sender.address
            m.contracts['MyToken'] = {'address': BOB, 'abi': ABI}

        assert self.executor.deploy(make_module("Token", deploy), self.options) is True

        assert seen == {'supply': 7, 'missing': 3, 'sender': ALICE}
        assert self.journal.is_complete("chain-31337", "Token")
        assert self.journal.deployed_addresses("chain-31337") == {'Token#MyToken': BOB}

    def test_completed_module_is_skipped(self):
        """Test that a journaled module is not executed again"""
        deploy = MagicMock()
        self.journal.record_module("chain-31337", "Token", {})
        assert self.executor.deploy(make_module("Token", deploy), self.options) is False
        deploy.assert_not_called()

    def test_failed_module_is_not_recorded(self):
        """Test that a failing module leaves no completion mark"""
        def deploy(m):
            raise RuntimeError("execution reverted")

        with pytest.raises(RuntimeError):
            self.executor.deploy(make_module("Token", deploy), self.options)
        assert not self.journal.is_complete("chain-31337", "Token")

    def test_module_without_deploy(self):
        """Test that a module lacking deploy(m) fails"""
        with pytest.raises(CantripsError, match="deploy"):
            self.executor.deploy(make_module("Empty"), self.options)

    def test_unsupported_strategy(self):
        """Test that only the basic strategy is accepted"""
        self.options.strategy = "create2"
        with pytest.raises(InvalidInputError):
            self.executor.deploy(make_module("Token", MagicMock()), self.options)

    def test_strategy_config_settings(self):
        """Test that the basic strategy only takes the settings it knows"""
        self.options.strategy_config = {'gas_limit': 5000000}
        self.executor.deploy(make_module("Token", MagicMock()), self.options)

        self.options.strategy_config = {'salt': '0x01'}
        with pytest.raises(InvalidInputError, match="salt"):
            self.executor.deploy(make_module("Other", MagicMock()), self.options)

    def test_default_sender_selection(self):
        """Test that --default-sender picks the matching signer"""
        assert self.executor.select_sender(None).address == ALICE
        assert self.executor.select_sender(BOB.upper().replace("0X", "0x")).address == BOB
        with pytest.raises(InvalidInputError):
            self.executor.select_sender("0x" + "c" * 40)

    def test_no_signers(self, tmp_path):
        """Test that a deployment needs at least one account"""
        executor = Web3Executor(make_context(tmp_path, signers=[]), self.journal)
        with pytest.raises(CantripsError):
            executor.select_sender(None)


class TestModuleDeployment:

    @pytest.fixture(autouse=True)
    def setup(self, tmp_path):
        self.context = make_context(tmp_path)
        self.options = DeploymentOptions(deployment_id="chain-31337")
        self.deployment = ModuleDeployment(self.context, "Token", self.options, Signer(ALICE))

    @patch('cantrips.deployments.executor.load_artifact')
    @patch('cantrips.deployments.executor.send_transaction')
    def test_contract_deploys_and_registers(self, mock_send, mock_artifact):
        """Test deploying a new contract instance"""
        mock_artifact.return_value = {'abi': ABI, 'bytecode': '0x6000'}
        mock_send.return_value = {'contractAddress': BOB, 'status': 1}
        self.context.get_web3.return_value.eth.get_transaction_count.return_value = 0

        self.deployment.contract("MyToken", 100)

        factory = self.context.get_web3.return_value.eth.contract
        factory.assert_any_call(abi=ABI, bytecode='0x6000')
        factory.return_value.constructor.assert_called_once_with(100)
        assert self.deployment.contracts == {'MyToken': {'address': BOB, 'abi': ABI}}

    @patch('cantrips.deployments.executor.load_artifact')
    def test_contract_at_references(self, mock_artifact):
        """Test referencing an existing contract under a custom id"""
        mock_artifact.return_value = {'abi': ABI, 'bytecode': '0x'}
        self.deployment.contract_at("MyToken", ALICE, contract_id="Legacy")
        assert self.deployment.contracts == {'Legacy': {'address': ALICE, 'abi': ABI}}

    @patch('cantrips.deployments.executor.load_artifact')
    def test_contract_id_used_twice(self, mock_artifact):
        """Test that two contracts cannot share an id"""
        mock_artifact.return_value = {'abi': ABI, 'bytecode': '0x'}
        self.deployment.contract_at("MyToken", ALICE)
        with pytest.raises(CantripsError):
            self.deployment.contract_at("MyToken", BOB)

    @patch('cantrips.deployments.executor.load_artifact')
    @patch('cantrips.deployments.executor.send_transaction')
    @patch('cantrips.deployments.executor.build_params')
    def test_strategy_gas_limit(self, mock_params, mock_send, mock_artifact):
        """Test that the strategy config overrides the configured gas limit"""
        mock_artifact.return_value = {'abi': ABI, 'bytecode': '0x6000'}
        mock_send.return_value = {'contractAddress': BOB, 'status': 1}
        options = DeploymentOptions(deployment_id="chain-31337", strategy_config={'gas_limit': 5000000})
        deployment = ModuleDeployment(self.context, "Token", options, Signer(ALICE))

        deployment.contract("MyToken")
        assert mock_params.call_args.args[2] == 5000000


class TestDeployedContracts:

    @pytest.fixture(autouse=True)
    def setup(self, tmp_path):
        self.context = make_context(tmp_path)
        self.journal = DeploymentJournal(self.context.deployments_path)
        self.journal.record_module("chain-31337", "Token", {'MyToken': {'address': ALICE, 'abi': ABI}})

    def test_get_deployed_contract_default_deployment(self):
        """Test lookup in chain-<chainId> with the recorded ABI"""
        get_deployed_contract(self.context, None, "Token#MyToken", abi=[])
        self.context.get_web3.return_value.eth.contract.assert_called_once_with(address=ALICE, abi=ABI)

    def test_get_deployed_contract_missing(self):
        """Test that unknown contract ids fail"""
        with pytest.raises(DeploymentLookupError):
            get_deployed_contract(self.context, "chain-31337", "Token#Other")

    def test_get_deployed_contract_fallback_abi(self):
        """Test that the given ABI is used when none was recorded"""
        addresses_path = os.path.join(self.context.deployments_path, "chain-1", "deployed_addresses.json")
        os.makedirs(os.path.dirname(addresses_path))
        with open(addresses_path, "w") as f:
            json.dump({'Old#Token': BOB}, f)

        get_deployed_contract(self.context, "chain-1", "Old#Token", abi=["fallback"])
        self.context.get_web3.return_value.eth.contract.assert_called_once_with(address=BOB, abi=["fallback"])

    def test_select_keeps_known_id(self):
        """Test that a deployed contract id is kept without prompting"""
        assert select_deployed_contract(self.context, "Token#MyToken", None, True) == "Token#MyToken"

    def test_select_unknown_non_interactive(self):
        """Test that an unknown id fails in non-interactive mode"""
        with pytest.raises(NonInteractiveError):
            select_deployed_contract(self.context, "Token#Nope", None, True)

    @patch('builtins.input', return_value="1")
    def test_select_prompts(self, mock_input):
        """Test the interactive choice among deployed contracts"""
        assert select_deployed_contract(self.context, None, None) == "Token#MyToken"

    def test_select_with_no_deployments(self):
        """Test that an empty deployment cannot be selected from"""
        with pytest.raises(DeploymentLookupError):
            select_deployed_contract(self.context, None, "chain-999", False)


class TestRunAllWithFiles:
    """Registry runs through the web3 executor with module files on disk"""

    @pytest.fixture(autouse=True)
    def setup(self, tmp_path):
        self.root = str(tmp_path / "project")
        self.context = make_context(tmp_path)
        self.journal = DeploymentJournal(self.context.deployments_path)
        self.executor = Web3Executor(self.context, self.journal)
        self.registry = ModuleRegistry(self.root, FileModuleResolver(self.root))

    def write(self, relative, body):
        path = os.path.join(self.root, relative)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "w") as f:
            f.write(body)

    def deploy_body(self, tag, module_id=None):
        header = f"MODULE_ID = {module_id!r}\n" if module_id else ""
        return header + f"def deploy(m):\n    m.contracts[{tag!r}] = {{'address': {BOB!r}, 'abi': []}}\n"

    def test_same_file_name_in_two_directories(self):
        """Test that modules sharing a file name are refused before any deployment"""
        self.write("a/Token.py", self.deploy_body("a"))
        self.write("b/Token.py", self.deploy_body("b"))
        self.registry.add("a/Token.py")
        self.registry.add("b/Token.py")

        with pytest.raises(InvalidModuleError, match="a/Token.py"):
            self.registry.run_all(self.executor, DeploymentOptions("chain-1"))
        assert self.journal.completed_modules("chain-1") == []

    def test_module_id_tells_them_apart(self):
        """Test that MODULE_ID lets both modules run"""
        self.write("a/Token.py", self.deploy_body("a"))
        self.write("b/Token.py", self.deploy_body("b", module_id="OtherToken"))
        self.registry.add("a/Token.py")
        self.registry.add("b/Token.py")

        applied = self.registry.run_all(self.executor, DeploymentOptions("chain-1"))
        assert [r.path for r in applied] == ["a/Token.py", "b/Token.py"]
        assert set(self.journal.deployed_addresses("chain-1")) == {'Token#a', 'OtherToken#b'}

    def test_rerun_applies_nothing(self):
        """Test that a second run skips journaled modules and reports none applied"""
        self.write("a/Token.py", self.deploy_body("a"))
        self.registry.add("a/Token.py")

        assert len(self.registry.run_all(self.executor, DeploymentOptions("chain-1"))) == 1
        assert self.registry.run_all(self.executor, DeploymentOptions("chain-1")) == []


if __name__ == "__main__":
    pytest.main([__file__])
