"""Tests for the kicad-delay command-line interface."""

import json

import pytest

from kicad_delay.cli import create_parser, main


@pytest.fixture
def project(project_file):
    """Project file in a directory that stops the config search."""
    (project_file.parent / ".git").mkdir()
    return str(project_file)


def _json_output(capsys):
    return json.loads(capsys.readouterr().out)


class TestParser:
    """Tests for argument parsing."""

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])
        assert exc_info.value.code == 0
        assert "kicad-delay" in capsys.readouterr().out

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 0
        assert "usage: kicad-delay" in capsys.readouterr().out

    def test_unknown_command(self):
        with pytest.raises(SystemExit) as exc_info:
            main(["route"])
        assert exc_info.value.code == 2

    def test_net_or_netclass_required(self, project):
        with pytest.raises(SystemExit):
            main(["trace", project, "--layer", "F.Cu", "--length", "10"])

    def test_net_and_netclass_exclusive(self, project):
        with pytest.raises(SystemExit):
            create_parser().parse_args(
                ["trace", project, "--net", "A", "--netclass", "B", "--layer", "F.Cu", "--length", "1"]
            )

    def test_via_layer_dests(self):
        args = create_parser().parse_args(
            ["via", "p.kicad_pro", "--net", "A", "--from", "F.Cu", "--to", "In1.Cu"]
        )
        assert args.layer_from == "F.Cu"
        assert args.layer_to == "In1.Cu"
        assert args.via_from is None


class TestProfilesCommand:
    """Tests for the profiles command."""

    def test_json(self, project, capsys):
        assert main(["profiles", project, "--format", "json"]) == 0
        data = _json_output(capsys)
        assert [p["name"] for p in data["profiles"]] == ["Fast", "Slow"]
        assert data["profiles"][0]["via_overrides"][0]["delay"] == 120
        assert data["net_classes"]["HighSpeed"] == "Fast"

    def test_table(self, project, capsys):
        assert main(["profiles", project]) == 0
        out = capsys.readouterr().out
        assert "Delay Profiles" in out
        assert "Fast" in out
        assert "HighSpeed" in out

    def test_missing_project(self, tmp_path, capsys):
        assert main(["profiles", str(tmp_path / "nope.kicad_pro")]) == 1
        assert "Project file not found" in capsys.readouterr().err

    @pytest.mark.parametrize(
        "data",
        [
            {"time_domain_parameters": "DDR4"},
            {"net_settings": ["Default"]},
            {"net_settings": {"netclass_assignments": [["CLK", "HighSpeed"]]}},
        ],
    )
    def test_malformed_sections(self, tmp_path, capsys, data):
        """Wrongly typed sections are reported, not raised as tracebacks."""
        (tmp_path / ".git").mkdir()
        path = tmp_path / "bad.kicad_pro"
        path.write_text(json.dumps(data))
        assert main(["profiles", str(path), "--format", "json"]) == 1
        err = capsys.readouterr().err
        assert err.startswith("Error: ")
        assert "bad.kicad_pro" in err

    def test_project_is_directory(self, tmp_path, capsys):
        (tmp_path / ".git").mkdir()
        folder = tmp_path / "board.kicad_pro"
        folder.mkdir()
        assert main(["profiles", str(folder), "--format", "json"]) == 1
        assert "Cannot read project file" in capsys.readouterr().err


class TestTraceCommand:
    """Tests for the trace command."""

    def test_trace_json(self, project, capsys):
        args = ["trace", project, "--netclass", "HighSpeed", "--layer", "F.Cu", "--length", "10"]
        assert main(args + ["--format", "json"]) == 0
        data = _json_output(capsys)
        assert data["delay_time_iu"] == 50
        assert data["delay_profile"] == "Fast"
        assert data["unit"] == "ps"
        assert data["delay"] == pytest.approx(0.05)

    def test_trace_by_net(self, project, capsys):
        args = ["trace", project, "--net", "DQ5", "--layer", "In1.Cu", "--length", "2.5"]
        assert main(args + ["--format", "json", "--unit", "fs"]) == 0
        data = _json_output(capsys)
        assert data["net_class"] == "HighSpeed"
        assert data["delay_time_iu"] == 15
        assert data["delay"] == 15

    def test_trace_table(self, project, capsys):
        args = ["trace", project, "--netclass", "HighSpeed", "--layer", "F.Cu", "--length", "10"]
        assert main(args + ["--unit", "fs"]) == 0
        assert "50 fs" in capsys.readouterr().out

    def test_untimed_net_warns(self, project, capsys):
        assert main(["trace", project, "--net", "GND", "--layer", "F.Cu", "--length", "10"]) == 0
        out = capsys.readouterr().out
        assert "no delay profile" in out

    def test_missing_profile_warns(self, project, capsys):
        args = ["trace", project, "--netclass", "Broken", "--layer", "F.Cu", "--length", "10"]
        assert main(args) == 0
        assert "not defined" in capsys.readouterr().out

    def test_quiet_config_suppresses_warning(self, project, capsys):
        from pathlib import Path

        (Path(project).parent / ".kicad-delay.toml").write_text("[defaults]\nquiet = true\n")
        assert main(["trace", project, "--net", "GND", "--layer", "F.Cu", "--length", "10"]) == 0
        assert "no delay profile" not in capsys.readouterr().out

    def test_negative_length(self, project, capsys):
        args = ["trace", project, "--netclass", "HighSpeed", "--layer", "F.Cu", "--length", "-1"]
        assert main(args) == 1
        captured = capsys.readouterr()
        assert "Error: Track length must not be negative" in captured.err
        assert captured.out == ""

    def test_unknown_netclass(self, project, capsys):
        args = ["trace", project, "--netclass", "Nope", "--layer", "F.Cu", "--length", "10"]
        assert main(args) == 1
        assert "Net class not found: Nope" in capsys.readouterr().err

    def test_verbose(self, project, capsys):
        from kicad_delay.logging import disable_verbose

        args = ["-v", "trace", project, "--netclass", "HighSpeed", "--layer", "F.Cu", "--length", "1"]
        try:
            assert main(args + ["--format", "json"]) == 0
        finally:
            disable_verbose()
        assert _json_output(capsys)["delay_time_iu"] == 5


class TestViaCommand:
    """Tests for the via command."""

    def test_override(self, project, capsys):
        args = ["via", project, "--netclass", "HighSpeed", "--from", "F.Cu", "--to", "B.Cu"]
        assert main(args + ["--format", "json"]) == 0
        data = _json_output(capsys)
        assert data["via_layers"] == ["F.Cu", "B.Cu"]
        assert data["override"] is True
        assert data["delay_time_iu"] == 120

    def test_stackup_height(self, project, capsys):
        args = [
            "via", project, "--netclass", "HighSpeed", "--from", "In1.Cu", "--to", "In2.Cu",
            "--preset", "jlcpcb-4", "--format", "json",
        ]
        assert main(args) == 0
        data = _json_output(capsys)
        assert data["override"] is False
        assert data["height_mm"] == pytest.approx(1.0825)
        # 10 time IU/mm * 1.0825 mm
        assert data["delay_time_iu"] == 10

    def test_stackup_height_disabled(self, project, capsys):
        from pathlib import Path

        (Path(project).parent / ".kicad-delay.toml").write_text(
            "[timing]\nuse_stackup_height = false\n"
        )
        args = [
            "via", project, "--netclass", "HighSpeed", "--from", "In1.Cu", "--to", "In2.Cu",
            "--preset", "jlcpcb-4", "--format", "json",
        ]
        assert main(args) == 0
        assert _json_output(capsys)["delay_time_iu"] == 0

    def test_stackup_file(self, project, tmp_path, capsys):
        stackup = tmp_path / "stackup.json"
        stackup.write_text(
            json.dumps(
                [
                    {"name": "F.Cu", "type": "copper", "thickness": 0.05},
                    {"name": "core", "type": "core", "thickness": 2.95},
                    {"name": "B.Cu", "type": "copper", "thickness": 0.05},
                ]
            )
        )
        args = [
            "via", project, "--netclass", "Legacy", "--from", "F.Cu", "--to", "B.Cu",
            "--stackup", str(stackup), "--format", "json",
        ]
        assert main(args) == 0
        data = _json_output(capsys)
        assert data["height_mm"] == pytest.approx(3.0)
        assert data["delay_time_iu"] == 60

    def test_bad_stackup_file(self, project, tmp_path, capsys):
        stackup = tmp_path / "stackup.json"
        stackup.write_text('[{"name": "F.Cu"}]')
        args = ["via", project, "--netclass", "Legacy", "--from", "F.Cu", "--to", "B.Cu"]
        assert main(args + ["--stackup", str(stackup)]) == 1
        assert "Invalid stackup file" in capsys.readouterr().err


class TestLengthCommand:
    """Tests for the length command."""

    def test_length_json(self, project, capsys):
        args = ["length", project, "--netclass", "Legacy", "--layer", "F.Cu", "--delay", "75"]
        assert main(args + ["--unit", "fs", "--format", "json"]) == 0
        data = _json_output(capsys)
        assert data["length_iu"] == 10_000_000
        assert data["length_mm"] == pytest.approx(10.0)

    def test_length_in_ps(self, project, capsys):
        args = ["length", project, "--net", "CLK", "--layer", "In1.Cu", "--delay", "0.15"]
        assert main(args + ["--format", "json"]) == 0
        data = _json_output(capsys)
        assert data["delay_time_iu"] == 150
        assert data["length_mm"] == pytest.approx(25.0)

    def test_unknown_profile_gives_zero(self, project, capsys):
        args = ["length", project, "--netclass", "Broken", "--layer", "F.Cu", "--delay", "1000"]
        assert main(args + ["--unit", "fs", "--format", "json"]) == 0
        assert _json_output(capsys)["length_iu"] == 0


class TestConfigCommand:
    """Tests for the config command."""

    def test_template(self, capsys):
        assert main(["config", "--template"]) == 0
        assert "[timing]" in capsys.readouterr().out

    def test_show(self, capsys):
        assert main(["config"]) == 0
        out = capsys.readouterr().out
        assert "timing.time_unit" in out
        assert "default" in out
