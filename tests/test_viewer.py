"""
Viewer Key Handling Tests
=========================
"""


class TestHandleKey:
    """Tests for handle_key."""

    def test_face_filter_keys(self):
        """Verify number keys select the face filter."""
        from framelab.models.filters import FilterKind
        from framelab.viewer import ViewerState, handle_key

        state, action = handle_key(ord("4"), ViewerState())

        assert action is None
        assert state.controls.face_filter.kind == FilterKind.PIXELATE
        assert state.controls.extension_filter.kind == FilterKind.IDENTITY

    def test_keys_follow_extension(self):
        """Verify number keys also set the extension filter while it is open."""
        from framelab.models.filters import FilterKind
        from framelab.viewer import ViewerState, handle_key

        state, _ = handle_key(ord("e"), ViewerState())
        assert state.extension_open

        state, _ = handle_key(ord("2"), state)
        assert state.controls.extension_filter.kind == FilterKind.BLUR

    def test_next_extension_filter(self):
        """Verify 'n' walks the menu and wraps."""
        from framelab.models.filters import FilterMode
        from framelab.viewer import EXTENSION_FILTERS, ViewerState, handle_key

        state = ViewerState()
        for _ in range(len(EXTENSION_FILTERS) - 1):
            state, _ = handle_key(ord("n"), state)
        assert state.controls.extension_filter == FilterMode.sticker("Sunglasses")

        state, _ = handle_key(ord("n"), state)
        assert state.controls.extension_filter == FilterMode.identity()

    def test_actions(self):
        """Verify capture, live, save and quit."""
        from framelab.viewer import ViewerState, handle_key

        state, action = handle_key(ord("c"), ViewerState())
        assert action == "capture"
        assert state.controls.live is False

        state, action = handle_key(ord("l"), state)
        assert action is None
        assert state.controls.live is True

        assert handle_key(ord("s"), state)[1] == "save"
        assert handle_key(ord("q"), state)[1] == "quit"
        assert handle_key(27, state)[1] == "quit"

    def test_unbound_key(self):
        """Verify unbound keys change nothing."""
        from framelab.viewer import ViewerState, handle_key

        state = ViewerState()
        assert handle_key(ord("z"), state) == (state, None)
