"""CLI tests for the css-inliner command."""
from __future__ import annotations

import json

from click.testing import CliRunner

from css_inliner.app import cli


def _invoke(args, input=None):
    return CliRunner().invoke(cli, args, input=input)


class TestCli:
    def test_stdin_to_stdout(self) -> None:
        result = _invoke([], input="<style>p{color:red}</style><p>x</p>")
        assert result.exit_code == 0, result.output
        assert result.output == '<p style="color:red">x</p>'

    def test_file_to_file(self, tmp_path) -> None:
        source = tmp_path / "in.html"
        target = tmp_path / "out.html"
        source.write_text("<style>p{color:red}</style><p>x</p>", encoding="utf-8")
        result = _invoke([str(source), "-o", str(target)])
        assert result.exit_code == 0, result.output
        assert target.read_text(encoding="utf-8") == '<p style="color:red">x</p>'

    def test_critical(self) -> None:
        result = _invoke(["--critical"], input="<style>p{color:red}</style><p>x</p>")
        assert result.exit_code == 0, result.output
        assert result.output == "<style>p{color:red}</style><p>x</p>"

    def test_directory(self, tmp_path) -> None:
        (tmp_path / "site.css").write_text("p { color: green }", encoding="utf-8")
        html = '<html><head><link rel="stylesheet" href="site.css"></head><body><p>x</p></body></html>'
        result = _invoke(["--directory", str(tmp_path)], input=html)
        assert result.exit_code == 0, result.output
        assert '<p style="color:green">x</p>' in result.output

    def test_attribute_policy_and_importantize(self) -> None:
        html = "<style>[title]{color:red}</style><p title='t'>x</p>"
        result = _invoke(["--attribute-policy", "both", "--importantize"], input=html)
        assert result.exit_code == 0, result.output
        assert "[title]{color:red !important}" in result.output
        assert 'style="color:red"' in result.output

    def test_handlebars(self) -> None:
        result = _invoke(["--handlebars"], input='<style>p{color:red}</style><p class="{{cls}}">x</p>')
        assert result.exit_code == 0, result.output
        assert 'class="{{cls}}"' in result.output

    def test_config_file(self, tmp_path) -> None:
        config = tmp_path / "inliner.json"
        config.write_text(json.dumps({"critical": True}), encoding="utf-8")
        result = _invoke(["--config", str(config)], input="<style>p{color:red}</style><p>x</p>")
        assert result.exit_code == 0, result.output
        assert result.output == "<style>p{color:red}</style><p>x</p>"

    def test_invalid_config(self, tmp_path) -> None:
        config = tmp_path / "inliner.json"
        config.write_text("{broken", encoding="utf-8")
        result = _invoke(["--config", str(config)], input="<p>x</p>")
        assert result.exit_code == 2
        assert "Invalid JSON" in result.output

    def test_invalid_base_url(self) -> None:
        result = _invoke(["--base-url", "not-a-url"], input="<p>x</p>")
        assert result.exit_code == 2

    def test_load_error_exits_with_status_1(self) -> None:
        html = '<html><head><link rel="stylesheet" href="site.css"></head><body></body></html>'
        result = _invoke([], input=html)
        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_parse_error_exits_with_status_1(self) -> None:
        result = _invoke([], input="<style>p color: red</style><p>x</p>")
        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_less(self, tmp_path) -> None:
        (tmp_path / "theme.less").write_text("@c: red;\np { color: @c; }\n", encoding="utf-8")
        html = '<html><head><link rel="stylesheet" href="theme.less"></head><body><p>x</p></body></html>'
        result = _invoke(["--less", "--directory", str(tmp_path)], input=html)
        assert result.exit_code == 0, result.output
        assert '<p style="color:red">x</p>' in result.output
