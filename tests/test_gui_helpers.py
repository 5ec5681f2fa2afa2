"""Tests for the pure presentation helpers behind the Tk widgets."""
from unittest.mock import Mock

import pytest

pytest.importorskip("tkinter")

from numberexplorer.gui.ControlPanel import ControlPanel, button_text, status_text
from numberexplorer.gui.NumberGridView import (
    ACTIVE_BACKGROUND,
    COMPLETED_BACKGROUND,
    PENDING_BACKGROUND,
    cell_style,
    cell_text,
)
from numberexplorer.types import LearningMode, SessionState, SessionStatus, TargetItem

ITEM = TargetItem(value=23, digit_form="23", spoken_form="二十三")


class TestCellStyle:

    def test_pending(self):
        assert cell_style(ITEM) == (PENDING_BACKGROUND, "black")

    def test_completed(self):
        assert cell_style(TargetItem(23, "23", "二十三", is_completed=True)) == (COMPLETED_BACKGROUND, "white")

    def test_active_wins_over_completed(self):
        item = TargetItem(23, "23", "二十三", is_completed=True, is_active=True)

        assert cell_style(item) == (ACTIVE_BACKGROUND, "black")

    def test_text_follows_mode(self):
        assert cell_text(ITEM, LearningMode.ENGLISH) == "23"
        assert cell_text(ITEM, LearningMode.CHINESE) == "二十三"


class TestControlPanelText:

    @pytest.mark.parametrize("status, expected", [
        (SessionStatus.IDLE, "Start Listening"),
        (SessionStatus.ACTIVE, "Stop Listening"),
        (SessionStatus.RECOVERING, "Stop Listening"),
        (SessionStatus.FAILED, "Start Listening"),
    ])
    def test_button_text(self, status, expected):
        assert button_text(SessionState(status)) == expected

    def test_status_text(self):
        assert status_text(SessionState(SessionStatus.ACTIVE)) == "Listening..."
        assert status_text(SessionState(SessionStatus.RECOVERING, 2)) == "Reconnecting (attempt 2)..."
        assert status_text(SessionState()) == "Not listening"
        assert status_text(
            SessionState(SessionStatus.FAILED, 3, last_failure="AudioDevice 7: lost")
        ) == "Not listening: AudioDevice 7: lost"


class TestControlPanelUpdate:

    def test_update_paints_current_state_not_notified_one(self):
        """Logic: the panel paints session.current_state(), not the state carried by a notification."""
        panel = Mock()
        panel.session.current_state.return_value = SessionState()
        ControlPanel._update_for_state(panel)

        panel.button.config.assert_called_once_with(text="Start Listening")
        panel.status_label.config.assert_called_once_with(text="Not listening")
