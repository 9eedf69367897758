"""
Unit tests for MutationEngine.

The transport is an AsyncMock so every ledger interaction is asserted
explicitly.
"""

from unittest.mock import AsyncMock

import pytest
from solders.keypair import Keypair  # type: ignore
from solders.pubkey import Pubkey  # type: ignore

from copain.application.use_cases.mutation_engine import MutationEngine
from copain.domain.entities.user_state import UserState
from copain.domain.exceptions import (
    InvalidIdentityError,
    PostConditionFailedError,
    SubmissionFailedError,
    TargetNotFoundError,
    TransactionException,
    TransactionTimeoutException,
)
from copain.domain.services.i_ledger_transport import LedgerAccount
from copain.utils.codec import encode_user_state

PROGRAM_ID = Pubkey.new_unique()


def _account(address: Pubkey, state: UserState = None) -> LedgerAccount:
    data = encode_user_state(state) + bytes(64) if state is not None else b""
    return LedgerAccount(address=address, data=data, lamports=1, owner=PROGRAM_ID)


class _Ledger:
    """Scripted account lookups for one payer and one friend."""

    def __init__(self, engine: MutationEngine, friend: Pubkey):
        self.engine = engine
        self.friend = friend
        self.states = []
        self.friend_exists = True

    async def get_account_info(self, address: Pubkey):
        if address == self.engine.state_address:
            return _account(address, self.states.pop(0))
        if address == self.friend and self.friend_exists:
            return _account(address)
        return None


@pytest.fixture
def transport():
    mock = AsyncMock()
    mock.send_and_confirm.return_value = "sig-1"
    return mock


@pytest.fixture
def friend() -> Pubkey:
    return Pubkey.new_unique()


@pytest.fixture
def mock_engine(transport, reporter) -> MutationEngine:
    return MutationEngine(
        transport=transport,
        payer=Keypair(),
        program_id=PROGRAM_ID,
        reporter=reporter,
    )


@pytest.fixture
def script(mock_engine, transport, friend) -> _Ledger:
    ledger = _Ledger(mock_engine, friend)
    transport.get_account_info.side_effect = ledger.get_account_info
    return ledger


class TestMutationEngine:
    """Unit tests for MutationEngine.apply and its shortcuts."""

    # ================================================================
    # Success path
    # ================================================================

    @pytest.mark.asyncio
    async def test_add_friend_submits_and_verifies(
        self, mock_engine, transport, script, friend
    ):
        """Test add friend submits one instruction and re-reads state."""
        script.states = [UserState.empty(), UserState.from_friends([str(friend)])]

        result = await mock_engine.add_friend(str(friend))

        assert result.submitted is True
        assert result.signature == "sig-1"
        assert result.state.has_friend(str(friend))
        assert result.actor == str(mock_engine.payer.pubkey())

        transport.send_and_confirm.assert_awaited_once()
        instructions, signers = transport.send_and_confirm.await_args.args
        assert len(instructions) == 1
        assert bytes(instructions[0].data) == b"\x00"
        assert instructions[0].program_id == PROGRAM_ID
        assert signers == [mock_engine.payer]

    @pytest.mark.asyncio
    async def test_remove_friend_submits(self, mock_engine, transport, script, friend):
        """Test remove friend sends opcode 1."""
        script.states = [UserState.from_friends([str(friend)]), UserState.empty()]

        result = await mock_engine.remove_friend(str(friend))

        assert result.submitted is True
        instructions, _ = transport.send_and_confirm.await_args.args
        assert bytes(instructions[0].data) == b"\x01"

    # ================================================================
    # Pre-check
    # ================================================================

    @pytest.mark.asyncio
    async def test_add_existing_friend_is_noop(
        self, mock_engine, transport, script, friend
    ):
        """Test satisfied add returns without submitting."""
        script.states = [UserState.from_friends([str(friend)])]

        result = await mock_engine.add_friend(str(friend))

        assert result.submitted is False
        assert result.signature is None
        transport.send_and_confirm.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_remove_missing_friend_is_noop(
        self, mock_engine, transport, script, friend
    ):
        """Test satisfied remove returns without submitting."""
        script.states = [UserState.empty()]

        result = await mock_engine.remove_friend(str(friend))

        assert result.submitted is False
        transport.send_and_confirm.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_noop_wins_over_missing_target(
        self, mock_engine, transport, script, friend
    ):
        """Test remove of an absent friend with no account still succeeds."""
        script.friend_exists = False
        script.states = [UserState.empty()]

        result = await mock_engine.remove_friend(str(friend))

        assert result.submitted is False

    @pytest.mark.asyncio
    async def test_set_online_always_submits(self, mock_engine, transport, script):
        """Test status flip is submitted even if already set."""
        script.states = [UserState(online=True), UserState(online=True)]

        result = await mock_engine.set_online(True)

        assert result.submitted is True
        instructions, _ = transport.send_and_confirm.await_args.args
        assert bytes(instructions[0].data) == b"\x02"
        assert len(instructions[0].accounts) == 2

    # ================================================================
    # Failures
    # ================================================================

    @pytest.mark.asyncio
    async def test_target_not_found(self, mock_engine, transport, script, friend):
        """Test missing target aborts before submission."""
        script.friend_exists = False
        script.states = [UserState.empty()]

        with pytest.raises(TargetNotFoundError) as exc_info:
            await mock_engine.add_friend(str(friend))

        assert exc_info.value.target == str(friend)
        assert exc_info.value.actor == str(mock_engine.payer.pubkey())
        transport.send_and_confirm.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_invalid_target(self, mock_engine, transport):
        """Test malformed target is rejected before any ledger call."""
        with pytest.raises(InvalidIdentityError):
            await mock_engine.add_friend("Target1")

        transport.get_account_info.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_submission_failure_is_wrapped(
        self, mock_engine, transport, script, friend
    ):
        """Test transport errors surface as SubmissionFailedError."""
        script.states = [UserState.empty()]
        cause = TransactionException("custom program error: 0x1")
        transport.send_and_confirm.side_effect = cause

        with pytest.raises(SubmissionFailedError) as exc_info:
            await mock_engine.add_friend(str(friend))

        error = exc_info.value
        assert error.cause is cause
        assert error.__cause__ is cause
        assert error.actor == str(mock_engine.payer.pubkey())
        assert error.target == str(friend)
        assert error.operation == "AddFriend"
        assert error.code == "SUBMISSION_FAILED"

    @pytest.mark.asyncio
    async def test_submission_is_not_retried(self, mock_engine, transport, script):
        """Test a timeout is reported after a single attempt."""
        script.states = [UserState.empty()]
        transport.send_and_confirm.side_effect = TransactionTimeoutException("timeout")

        with pytest.raises(SubmissionFailedError):
            await mock_engine.set_online(True)

        assert transport.send_and_confirm.await_count == 1

    @pytest.mark.asyncio
    async def test_post_condition_failure(
        self, mock_engine, transport, script, friend
    ):
        """Test confirmed transaction without effect raises."""
        script.states = [UserState.empty(), UserState.empty()]

        with pytest.raises(PostConditionFailedError) as exc_info:
            await mock_engine.add_friend(str(friend))

        error = exc_info.value
        assert error.signature == "sig-1"
        assert error.target == str(friend)
        assert str(friend) in error.expected

    @pytest.mark.asyncio
    async def test_set_online_post_condition(self, mock_engine, script):
        """Test status flip that did not land raises."""
        script.states = [UserState.empty(), UserState.empty()]

        with pytest.raises(PostConditionFailedError) as exc_info:
            await mock_engine.set_online(True)

        assert exc_info.value.target == "online"

    # ================================================================
    # Accessors
    # ================================================================

    @pytest.mark.asyncio
    async def test_get_own_state_absent(self, mock_engine, transport):
        """Test missing state account reads as empty."""
        transport.get_account_info.return_value = None

        assert await mock_engine.get_own_state() == UserState.empty()

    def test_state_address_derived_from_payer(self, mock_engine):
        """Test state address belongs to the payer."""
        assert mock_engine.state_address == mock_engine.reader.address_of(
            mock_engine.payer.pubkey()
        )
