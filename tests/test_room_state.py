"""
Tests for Room State Materialization

Tests for folding state events into RoomState snapshots and for the
derived display name and avatar.
"""

import pytest

from chat_sdk import Direction, RoomState, StateEvent, materialize
from chat_sdk.room_state import (
    EMPTY_ROOM_NAME,
    ROOM_INVITE_NAME,
    compute_display_name,
)


def name_event(name):
    return StateEvent("m.room.name", "", {"name": name})


def avatar_event(url):
    return StateEvent("m.room.avatar", "", {"url": url})


def member_event(user_id, membership="join", displayname=None):
    content = {"membership": membership}
    if displayname:
        content["displayname"] = displayname
    return StateEvent("m.room.member", user_id, content)


class TestForwardMaterialization:
    """Tests for chronological replay."""

    def test_last_write_wins(self):
        """Test that the later of two events for a key wins."""
        state = materialize([name_event("A"), name_event("B")])
        assert state.get_content("m.room.name") == {"name": "B"}
        assert state.display_name == "B"

    def test_applying_twice_is_idempotent(self):
        """Test that replaying the same sequence twice changes nothing."""
        events = [
            name_event("Team Chat"),
            member_event("@alice:server"),
            member_event("@bob:server", "invite"),
        ]
        once = materialize(events)
        twice = materialize(events, initial=once)
        assert twice == once

    def test_duplicate_events_are_no_ops(self):
        """Test that a repeated identical event does not add entries."""
        state = materialize([name_event("A"), name_event("A")])
        assert len(state.entries) == 1

    def test_state_key_separates_entries(self):
        """Test that one member event per user is kept."""
        state = materialize(
            [member_event("@alice:server"), member_event("@bob:server")]
        )
        assert set(state.get_members()) == {"@alice:server", "@bob:server"}

    def test_unknown_event_type_is_stored(self):
        """Test that unknown types are kept but do not affect derived fields."""
        custom = StateEvent("org.example.custom", "", {"name": "ignored"})
        state = materialize([custom])
        assert state.get_content("org.example.custom") == {"name": "ignored"}
        assert state.display_name == EMPTY_ROOM_NAME
        assert state.avatar_url is None

    def test_same_inputs_give_same_snapshot(self):
        """Test that materialization is deterministic."""
        events = [name_event("A"), avatar_event("mxc://a")]
        assert materialize(events) == materialize(events)


class TestBackwardMaterialization:
    """Tests for reverse-chronological replay."""

    def test_first_write_wins(self):
        """Test that the first of two events for a key wins."""
        state = materialize(
            [name_event("A"), name_event("B")], Direction.BACKWARDS
        )
        assert state.get_content("m.room.name") == {"name": "A"}

    def test_existing_entries_are_kept(self):
        """Test that older events never overwrite the starting snapshot."""
        initial = materialize([name_event("Current")])
        state = materialize(
            [name_event("Older"), avatar_event("mxc://old")],
            Direction.BACKWARDS,
            initial=initial,
        )
        assert state.display_name == "Current"
        assert state.avatar_url == "mxc://old"


class TestSnapshotIsolation:
    """Tests that materialization never mutates its inputs."""

    def test_initial_snapshot_untouched(self):
        """Test that the starting snapshot is left as it was."""
        initial = materialize([name_event("A")])
        materialize([name_event("B")], initial=initial)
        assert initial.display_name == "A"
        assert initial.get_content("m.room.name") == {"name": "A"}

    def test_entries_are_read_only(self):
        """Test that the snapshot mapping cannot be written to."""
        state = materialize([name_event("A")])
        with pytest.raises(TypeError):
            state.entries[("m.room.name", "")] = {"name": "B"}

    def test_content_is_read_only(self):
        """Test that an entry's content cannot be written to."""
        state = materialize([name_event("A")])
        with pytest.raises(TypeError):
            state.get_content("m.room.name")["name"] = "Hacked"
        assert state.get_content("m.room.name") == {"name": "A"}

    def test_event_mutation_does_not_reach_snapshot(self):
        """Test that the snapshot keeps its own copy of event content."""
        event = name_event("A")
        state = materialize([event])
        event.content["name"] = "Changed"
        assert state.get_content("m.room.name") == {"name": "A"}
        assert state.display_name == "A"

    def test_snapshots_do_not_share_content(self):
        """Test that a snapshot built on another has its own content."""
        aliases = StateEvent("m.room.aliases", "", {"aliases": ["#a:server"]})
        first = materialize([aliases])
        second = materialize([], initial=first)

        first.get_content("m.room.aliases")["aliases"].append("#b:server")

        assert second.get_content("m.room.aliases") == {
            "aliases": ["#a:server"]
        }
        assert second.display_name == "#a:server"

    def test_empty_sequence_recomputes_derived_fields(self):
        """Test that an empty replay keeps entries and recomputes names."""
        initial = RoomState(room_id="!r:server")
        state = materialize([], initial=initial)
        assert state.room_id == "!r:server"
        assert len(state.entries) == 0
        assert state.display_name == EMPTY_ROOM_NAME


class TestDisplayName:
    """Tests for the room naming policy."""

    def test_canonical_alias_when_no_name(self):
        """Test that the canonical alias is used without a room name."""
        state = materialize(
            [StateEvent("m.room.canonical_alias", "", {"alias": "#team:server"})]
        )
        assert state.display_name == "#team:server"

    def test_first_alias_when_no_canonical_alias(self):
        """Test that the first published alias is the next fallback."""
        state = materialize(
            [
                StateEvent(
                    "m.room.aliases",
                    "",
                    {"aliases": ["#one:server", "#two:server"]},
                )
            ]
        )
        assert state.display_name == "#one:server"

    def test_blank_name_is_ignored(self):
        """Test that a whitespace-only name falls through to members."""
        state = materialize(
            [name_event("  "), member_event("@bob:server", displayname="Bob")]
        )
        assert state.display_name == "Bob"

    def test_viewer_is_excluded(self):
        """Test that the viewer never names the room after themselves."""
        state = materialize(
            [
                member_event("@me:server", displayname="Me"),
                member_event("@bob:server", displayname="Bob"),
            ],
            my_user_id="@me:server",
        )
        assert state.display_name == "Bob"

    def test_two_members(self):
        """Test naming after two other members."""
        state = materialize(
            [
                member_event("@alice:server", displayname="Alice"),
                member_event("@bob:server", "invite", displayname="Bob"),
            ]
        )
        assert state.display_name == "Alice and Bob"

    def test_many_members(self):
        """Test naming after the first member and a count."""
        state = materialize(
            [
                member_event("@carol:server"),
                member_event("@alice:server"),
                member_event("@bob:server"),
            ]
        )
        assert state.display_name == "@alice:server and 2 others"

    def test_departed_members_are_ignored(self):
        """Test that members who left do not name the room."""
        state = materialize([member_event("@bob:server", "leave")])
        assert state.display_name == EMPTY_ROOM_NAME

    def test_invited_viewer_alone(self):
        """Test the name shown to a viewer invited into an empty room."""
        entries = {("m.room.member", "@me:server"): {"membership": "invite"}}
        assert compute_display_name(entries, "@me:server") == ROOM_INVITE_NAME
