"""
Test fixtures and configuration.
"""

import io

import pytest
from solders.keypair import Keypair  # type: ignore
from solders.pubkey import Pubkey  # type: ignore

from copain.application.use_cases.get_online_friends import GetOnlineFriends
from copain.application.use_cases.mutation_engine import MutationEngine
from copain.infrastructure.blockchain.state_reader import StateReader
from copain.infrastructure.monitoring.system_reporter import SystemReporter
from tests.fakes import InMemoryLedger


@pytest.fixture
def reporter() -> SystemReporter:
    """Quiet reporter writing to an in-memory stream."""
    return SystemReporter(name="copain-test", verbose=3, stream=io.StringIO())


@pytest.fixture
def program_id() -> Pubkey:
    return Pubkey.new_unique()


@pytest.fixture
def ledger(program_id) -> InMemoryLedger:
    return InMemoryLedger(program_id=program_id)


@pytest.fixture
def payer(ledger) -> Keypair:
    """Funded payer with an allocated, zero-filled state account."""
    keypair = Keypair()
    ledger.add_wallet(keypair.pubkey())
    reader = StateReader(ledger, ledger.program_id)
    ledger.allocate_state(reader.address_of(keypair.pubkey()))
    return keypair


@pytest.fixture
def reader(ledger) -> StateReader:
    return StateReader(ledger, ledger.program_id)


@pytest.fixture
def engine(ledger, payer, reader, reporter) -> MutationEngine:
    return MutationEngine(
        transport=ledger,
        payer=payer,
        program_id=ledger.program_id,
        reader=reader,
        reporter=reporter,
    )


@pytest.fixture
def query(reader, engine) -> GetOnlineFriends:
    return GetOnlineFriends(reader=reader, engine=engine)


@pytest.fixture
def registered_user(ledger, reader):
    """Factory creating a funded identity with a state account."""

    def _make(online: bool = False, friends=()) -> str:
        keypair = Keypair()
        ledger.add_wallet(keypair.pubkey())
        ledger.write_state(reader.address_of(keypair.pubkey()), online, friends)
        return str(keypair.pubkey())

    return _make
