"""Tests for the Streamlit page helpers (no browser session)."""

from app.main import FLASH_KEY, flash, pop_flash


class TestFlashMessages:
    """A message set before st.rerun() is shown once on the next run."""

    def test_message_survives_until_next_run(self):
        state = {}
        flash(state, "Data berhasil dihapus.")
        assert state[FLASH_KEY] == "Data berhasil dihapus."

        assert pop_flash(state) == "Data berhasil dihapus."
        assert pop_flash(state) is None

    def test_nothing_pending(self):
        assert pop_flash({"user": None}) is None

    def test_later_message_replaces_earlier(self):
        state = {}
        flash(state, "Data tersimpan.")
        flash(state, "Data berhasil dihapus.")
        assert pop_flash(state) == "Data berhasil dihapus."
