"""
Session loop tests - prompt/read/dispatch cycles driven by scripted keys.
"""

import pytest

from kokoro_console import session as session_module
from kokoro_console.catalog import VoiceCatalog
from kokoro_console.config import SessionConfig
from kokoro_console.errors import EngineError
from kokoro_console.session import ConsoleSession, bootstrap_engine, pick_startup_voice
from kokoro_console.terminal import CTRL_D, ENTER, ESCAPE, TAB

from helpers import FakeEngine, ScriptedKeys, typed


def make_session(catalog, keys, screen, engine=None, voice="af_heart", config=None):
    engine = engine or FakeEngine()
    return ConsoleSession(
        catalog,
        engine,
        catalog.lookup(voice),
        config=config,
        keys=ScriptedKeys(keys),
        terminal=screen,
    ), engine


class TestConsoleSession:
    """Test the read-eval loop."""

    def test_exit_ends_loop(self, small_catalog, screen, capsys):
        session, engine = make_session(small_catalog, typed("exit\n"), screen)
        session.run()
        out = capsys.readouterr().out
        assert "Using voice: af_heart (en)" in out
        assert "Goodbye!" in out
        assert engine.spoken == []

    def test_eof_ends_loop(self, small_catalog, screen, capsys):
        session, _ = make_session(small_catalog, typed("hello\n"), screen)
        session.run()
        assert "Exiting." in capsys.readouterr().out

    def test_ctrl_d_at_empty_prompt_ends_loop(self, small_catalog, screen, capsys):
        keys = typed("one") + [CTRL_D] + typed("\n") + [CTRL_D] + typed("never\n")
        session, engine = make_session(small_catalog, keys, screen)
        session.run()
        assert "Exiting." in capsys.readouterr().out
        assert engine.spoken == [("one", "af_heart")]

    def test_keyboard_interrupt_ends_loop(self, small_catalog, screen, capsys):
        class InterruptingKeys(ScriptedKeys):
            def read_key(self):
                raise KeyboardInterrupt

        session = ConsoleSession(
            small_catalog, FakeEngine(), small_catalog.lookup("af_heart"),
            keys=InterruptingKeys([]), terminal=screen,
        )
        session.run()
        assert "Exiting." in capsys.readouterr().out

    def test_prompt_written_each_cycle(self, small_catalog, screen):
        session, _ = make_session(small_catalog, typed("\n\nquit\n"), screen)
        session.run()
        assert screen.stream.getvalue().count("> ") == 3

    def test_wav_indicator_in_prompt(self, small_catalog, screen):
        session, _ = make_session(small_catalog, typed("wav on\nquit\n"), screen)
        session.run()
        assert "(wav) > " in screen.stream.getvalue()
        assert session.state.config.save_wav is True

    def test_speaks_typed_text(self, small_catalog, screen):
        session, engine = make_session(small_catalog, typed("Hello world\nquit\n"), screen)
        session.run()
        assert engine.spoken == [("Hello world", "af_heart")]

    def test_line_is_trimmed(self, small_catalog, screen):
        session, engine = make_session(small_catalog, typed("   spaced out   \nquit\n"), screen)
        session.run()
        assert engine.spoken == [("spaced out", "af_heart")]

    def test_tab_completion_switches_voice(self, small_catalog, screen):
        keys = typed("voice bm") + [TAB, ENTER] + typed("Hi\nquit\n")
        session, engine = make_session(small_catalog, keys, screen)
        session.run()
        assert session.voice.name == "bm_lewis"
        assert engine.spoken == [("Hi", "bm_lewis")]

    def test_escape_reverts_before_commit(self, small_catalog, screen, capsys):
        keys = typed("voice b") + [TAB, TAB, ESCAPE] + typed("f_bella\nquit\n")
        session, _ = make_session(small_catalog, keys, screen)
        session.run()
        assert session.voice.name == "bf_bella"

    def test_synthesis_failure_does_not_stop_loop(self, small_catalog, screen, capsys):
        engine = FakeEngine(speak_error="device busy")
        session, _ = make_session(small_catalog, typed("one\ntwo\nquit\n"), screen, engine=engine)
        session.run()
        out = capsys.readouterr().out
        assert out.count("Error speaking text") == 2
        assert "Goodbye!" in out

    def test_opens_terminal_per_read_when_no_keys_given(self, small_catalog, screen, monkeypatch):
        opened = []

        def fake_open():
            keys = ScriptedKeys(typed("quit\n"))
            opened.append(keys)
            return keys

        monkeypatch.setattr(session_module, "open_key_source", fake_open)
        session = ConsoleSession(small_catalog, FakeEngine(), small_catalog.lookup("af_heart"), terminal=screen)
        session.run()
        assert len(opened) == 1
        assert opened[0].closed


class TestEndToEnd:
    """The worked example: three voices, a handful of commands."""

    def test_full_scenario(self, small_catalog, screen, capsys):
        script = (
            "voice bm_lewis\n"
            "voice bm_lewi\n"
            "voices bf_\n"
            "search en\n"
            "\n"
            "voice \n"
            "quit\n"
        )
        session, engine = make_session(small_catalog, typed(script), screen)
        session.run()
        out = capsys.readouterr().out

        # Switch succeeded, the typo and the empty name left it alone
        assert session.voice.name == "bm_lewis"
        assert "Switched to voice: bm_lewis (en)" in out
        assert "Voice 'bm_lewi' not found." in out
        assert "Did you mean one of these?" in out
        assert "Voices starting with 'bf_' (1 found):" in out
        assert "Found 3 voice(s) matching 'en'" in out
        assert "Please specify a voice name." in out
        assert engine.spoken == []

    def test_bootstrap_then_session(self, small_catalog, screen, capsys):
        engine = FakeEngine(load_failures=2)
        bootstrap_engine(engine, attempts=3, delay=1.0, sleep=lambda _: None)
        session, _ = make_session(small_catalog, typed("Hello\nexit\n"), screen, engine=engine)
        session.run()

        out = capsys.readouterr().out
        assert out.count("Failed to load model") == 2
        assert "Model loaded successfully!" in out
        assert engine.spoken == [("Hello", "af_heart")]


class TestBootstrap:

    def test_announces_progress(self, capsys):
        bootstrap_engine(FakeEngine(), sleep=lambda _: None)
        out = capsys.readouterr().out
        assert "Loading model..." in out
        assert "Model loaded successfully!" in out

    def test_exhaustion_propagates(self, capsys):
        with pytest.raises(EngineError):
            bootstrap_engine(FakeEngine(load_failures=3), attempts=3, sleep=lambda _: None)
        assert "Model loaded successfully!" not in capsys.readouterr().out


class TestPickStartupVoice:

    def test_preferred(self, small_catalog, capsys):
        assert pick_startup_voice(small_catalog, "bm_lewis").name == "bm_lewis"
        assert capsys.readouterr().out == ""

    def test_fallback_warns(self, small_catalog, capsys):
        voice = pick_startup_voice(small_catalog, "missing")
        assert voice.name == "af_heart"
        assert "Default voice 'missing' not found. Using 'af_heart' instead." in capsys.readouterr().out

    def test_empty_catalog(self):
        assert pick_startup_voice(VoiceCatalog([]), "bm_lewis") is None
