"""
Pipeline stage tests - env_check, templates_compose, results_report
"""

import tempfile
from pathlib import Path

import pytest

from jspcompose.__main__ import (
    env_check,
    templates_compose,
    results_report,
    settings_fromState,
    parser,
)
from jspcompose.models import ProgramState, pipeline


def webapp_make(root: Path) -> None:
    templates = root / "WEB-INF" / "__jsp"
    (templates / "__config").mkdir(parents=True)
    (templates / "__config" / "main.jsp").write_text("<!-- @doBody -->\n", encoding="utf-8")
    (templates / "index.jsp").write_text("<!-- @variable __layout=main -->\n<p>hi</p>\n", encoding="utf-8")


class TestPipeline:
    """Test the stages run by main()"""

    def test_full_run(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            webapp_make(root)
            state = pipeline(
                ProgramState(inputdir=root, outputdir=root, verbosity=0),
                env_check, templates_compose, results_report,
            )

            assert state.envOK is True
            assert state.processResult["status"] is True
            assert state.processResult["pages_composed"] == 1
            assert state.processResult["includes_written"] == 1
            assert (root / "WEB-INF" / "jsp" / "index_inc.jsp").exists()

    def test_skip(self):
        state = pipeline(
            ProgramState(inputdir=Path("missing"), skip=True, verbosity=0),
            env_check, templates_compose, results_report,
        )
        assert state.envOK is False
        assert state.processResult is None

    def test_missing_inputdir(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            with pytest.raises(SystemExit) as info:
                env_check(ProgramState(inputdir=Path(tmpdir) / "missing", verbosity=0))
            assert info.value.code == 1

    def test_unknown_encoding(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            state = ProgramState(inputdir=Path(tmpdir), pageEncoding="no-such-codec", verbosity=0)
            with pytest.raises(SystemExit):
                env_check(state)

    def test_known_encoding(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            state = env_check(ProgramState(inputdir=Path(tmpdir), pageEncoding="latin_1", verbosity=0))
            assert state.envOK is True

    def test_undecodable_page_exits(self, capsys):
        """A page that is not valid UTF-8 is reported, not raised"""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            webapp_make(root)
            (root / "WEB-INF" / "__jsp" / "binary.jsp").write_bytes(b"<p>\xff\xfe</p>")

            with pytest.raises(SystemExit) as info:
                pipeline(
                    ProgramState(inputdir=root, outputdir=root, verbosity=0),
                    env_check, templates_compose,
                )
            assert info.value.code == 1
            assert "Composition error" in capsys.readouterr().err

    def test_invalid_import_file_exits(self, capsys):
        """A YAML import that is not a mapping is reported, not raised"""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            webapp_make(root)
            templates = root / "WEB-INF" / "__jsp"
            (templates / "__config" / "list.yaml").write_text("- a\n- b\n", encoding="utf-8")
            (templates / "about.jsp").write_text("<!-- @variables: list.yaml -->\n", encoding="utf-8")

            with pytest.raises(SystemExit) as info:
                pipeline(
                    ProgramState(inputdir=root, outputdir=root, verbosity=0),
                    env_check, templates_compose,
                )
            assert info.value.code == 1
            assert "mapping" in capsys.readouterr().err

    def test_composition_error_exits(self, capsys):
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            webapp_make(root)
            (root / "WEB-INF" / "__jsp" / "bad.jsp").write_text("<!-- @variables\na=1\n", encoding="utf-8")

            with pytest.raises(SystemExit) as info:
                pipeline(
                    ProgramState(inputdir=root, outputdir=root, verbosity=0),
                    env_check, templates_compose,
                )
            assert info.value.code == 1
            assert "must have a closing directive" in capsys.readouterr().err


class TestOptions:
    """Test CLI option handling"""

    def test_settings_from_state(self):
        state = ProgramState(jspDir="/views", genDirName="out", pageEncoding="UTF-8", minimize=True)
        settings = settings_fromState(state)

        assert settings.jsp_dir == "/views"
        assert settings.gen_dir_name == "out"
        assert settings.pageEncoding_get() == "UTF-8"
        assert settings.minimize is True

    def test_parser_defaults(self):
        options = parser.parse_args([])
        assert options.jspDir == "/WEB-INF/__jsp"
        assert options.genDirName == "jsp"
        assert options.minimize is False
        assert options.verbosity == 1

    def test_state_from_namespace(self):
        options = parser.parse_args(["--minimize", "--genDirName", "views", "-vv"])
        state = ProgramState.state_createFromNamespace(options, Path("in"), Path("out"))

        assert state.minimize is True
        assert state.genDirName == "views"
        assert state.verbosity == 3
        assert state.outputdir == Path("out")
