"""
Unit tests for friend-state operations and instruction building.
"""

from solders.pubkey import Pubkey  # type: ignore

from copain.domain.entities.user_state import UserState
from copain.domain.value_objects.identity import Identity
from copain.domain.value_objects.operation import (
    AddFriend,
    Opcode,
    RemoveFriend,
    SetOnline,
)


def _friend() -> Identity:
    return Identity.from_pubkey(Pubkey.new_unique())


class TestOperations:
    """Unit tests for AddFriend, RemoveFriend and SetOnline."""

    # ================================================================
    # Opcodes
    # ================================================================

    def test_opcode_values(self):
        """Test wire opcodes."""
        assert Opcode.ADD_FRIEND == 0
        assert Opcode.REMOVE_FRIEND == 1
        assert Opcode.SET_ONLINE == 2
        assert Opcode.SET_OFFLINE == 3

    def test_set_online_opcode_follows_flag(self):
        """Test SetOnline picks online/offline opcode."""
        assert SetOnline(True).opcode == Opcode.SET_ONLINE
        assert SetOnline(False).opcode == Opcode.SET_OFFLINE

    # ================================================================
    # Instructions
    # ================================================================

    def test_add_friend_instruction(self):
        """Test AddFriend carries one data byte and three accounts."""
        program, payer, state = (Pubkey.new_unique() for _ in range(3))
        friend = _friend()

        ix = AddFriend(friend).build_instruction(program, payer, state)

        assert ix.program_id == program
        assert bytes(ix.data) == b"\x00"
        metas = ix.accounts
        assert [m.pubkey for m in metas] == [payer, state, friend.to_pubkey()]
        assert (metas[0].is_signer, metas[0].is_writable) == (True, False)
        assert (metas[1].is_signer, metas[1].is_writable) == (False, True)
        assert (metas[2].is_signer, metas[2].is_writable) == (False, False)

    def test_remove_friend_instruction(self):
        """Test RemoveFriend uses opcode 1."""
        program, payer, state = (Pubkey.new_unique() for _ in range(3))

        ix = RemoveFriend(_friend()).build_instruction(program, payer, state)

        assert bytes(ix.data) == b"\x01"
        assert len(ix.accounts) == 3

    def test_set_online_instruction(self):
        """Test status instructions have no target account."""
        program, payer, state = (Pubkey.new_unique() for _ in range(3))

        online = SetOnline(True).build_instruction(program, payer, state)
        offline = SetOnline(False).build_instruction(program, payer, state)

        assert bytes(online.data) == b"\x02"
        assert bytes(offline.data) == b"\x03"
        assert [m.pubkey for m in online.accounts] == [payer, state]

    # ================================================================
    # Predicates
    # ================================================================

    def test_friend_predicates(self):
        """Test satisfied checks against state membership."""
        friend = _friend()
        with_friend = UserState.from_friends([friend.address])

        assert AddFriend(friend).is_satisfied(with_friend)
        assert not AddFriend(friend).is_satisfied(UserState.empty())
        assert RemoveFriend(friend).is_satisfied(UserState.empty())
        assert not RemoveFriend(friend).is_satisfied(with_friend)

    def test_friend_operations_skip_when_satisfied(self):
        """Test only friend operations short-circuit."""
        assert AddFriend(_friend()).skip_when_satisfied
        assert RemoveFriend(_friend()).skip_when_satisfied
        assert not SetOnline(True).skip_when_satisfied

    def test_targets_and_subjects(self):
        """Test target identity and subject labels."""
        friend = _friend()

        assert AddFriend(friend).target == friend
        assert AddFriend(friend).subject == friend.address
        assert SetOnline(True).target is None
        assert SetOnline(True).subject == "online"
        assert SetOnline(False).subject == "offline"

    def test_set_online_predicate(self):
        """Test online flag predicate."""
        assert SetOnline(True).is_satisfied(UserState(online=True))
        assert SetOnline(False).is_satisfied(UserState.empty())
        assert not SetOnline(True).is_satisfied(UserState.empty())
