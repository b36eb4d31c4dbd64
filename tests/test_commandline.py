# SPDX-FileCopyrightText: 2021 Malte Kliemann, Ole Kliemann
#
# SPDX-License-Identifier: GPL-3.0-or-later

import os

import pytest

from cppumockgen import commandline
from cppumockgen import utils


def test_success(monkeypatch, mocker, script_runner):
    args = mocker.Mock()
    monkeypatch.setattr(commandline, "parse_args", mocker.Mock(return_value=args))
    monkeypatch.setattr(commandline, "generate", mocker.Mock(return_value=0))
    ret = script_runner.run(["cppumockgen"])
    assert ret.success
    commandline.generate.assert_called_once_with(args)


def test_parse_error_exit_code(monkeypatch, mocker, script_runner):
    monkeypatch.setattr(commandline, "parse_args", mocker.Mock())
    monkeypatch.setattr(commandline, "generate", mocker.Mock(return_value=2))
    ret = script_runner.run(["cppumockgen"])
    assert not ret.success
    assert ret.returncode == 2


def test_parser_fails(script_runner):
    ret = script_runner.run(["cppumockgen", "--no-such-option"])
    assert not ret.success
    assert ret.returncode == 2


def test_version(script_runner):
    ret = script_runner.run(["cppumockgen", "--version"])
    assert ret.success
    assert ret.stdout == f"CppUMockGen v{utils.VERSION}\n"


def test_failure(monkeypatch, mocker, script_runner):
    args = mocker.Mock()
    monkeypatch.setattr(commandline, "parse_args", mocker.Mock(return_value=args))
    monkeypatch.setattr(
        commandline,
        "generate",
        mocker.Mock(side_effect=utils.CppUMockGenRuntimeError("foo")),
    )
    ret = script_runner.run(["cppumockgen"])
    assert not ret.success
    assert ret.returncode == 1
    assert ret.stderr.startswith("cppumockgen: error: foo")


@pytest.mark.parametrize(
    "error", [AttributeError(), IOError(), RuntimeError(), ValueError()]
)
def test_panic(error, monkeypatch, mocker, script_runner):
    monkeypatch.setattr(commandline, "parse_args", mocker.Mock())
    monkeypatch.setattr(commandline, "generate", mocker.Mock(side_effect=error))
    ret = script_runner.run(["cppumockgen"], print_result=False)
    assert not ret.success
    assert ret.stderr.startswith("Traceback")


@pytest.mark.parametrize(
    "argv, message",
    [
        (["-m"], "No input file specified"),
        (["header1.h"], "At least the mock generation option (-m)"),
        (["header1.h", "-m", "-t", "f#p"], "Invalid override option <f#p>."),
    ],
)
def test_generate_config_errors(argv, message):
    args = commandline.parse_args(argv)
    with pytest.raises(utils.CppUMockGenRuntimeError) as e:
        commandline.generate(args)
    assert str(e.value).startswith(message)


def test_generate_input_error(tmp_path, capsys):
    args = commandline.parse_args([str(tmp_path / "missing.h"), "-m"])
    assert commandline.generate(args) == commandline.EXIT_PARSE_ERROR
    assert capsys.readouterr().err.startswith("INPUT ERROR: ")


class TestParseArgs:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("CPPUMOCKGEN_INCLUDE", raising=False)
        args = commandline.parse_args(["header1.h"])
        assert args.input == "header1.h"
        assert args.mock_output is None
        assert args.expect_output is None
        assert not args.cpp
        assert args.std is None
        assert not args.underlying_typedef
        assert args.include_path == []
        assert args.type_override == []
        assert not args.regen

    def test_input_option(self):
        args = commandline.parse_args(["-i", "header1.h", "-m", "-e", "out"])
        assert args.input == "header1.h"
        assert args.mock_output == ""
        assert args.expect_output == "out"

    def test_include_from_environment(self, monkeypatch):
        monkeypatch.setenv("CPPUMOCKGEN_INCLUDE", "/opt/include")
        args = commandline.parse_args(["header1.h", "-I", "foo"])
        assert args.include_path == ["foo", "/opt/include"]

    def test_config_file(self, tmp_path):
        nested = tmp_path / "nested.cfg"
        nested.write_text("-t '#int=Long' # comment\n")
        config = tmp_path / "main.cfg"
        config.write_text(f"-x -s c++14\n-f {nested}\n-f {config}\n")
        args = commandline.parse_args(["header1.hpp", "-f", str(config), "-m"])
        assert args.cpp
        assert args.std == "c++14"
        assert args.type_override == ["#int=Long"]

    def test_missing_config_file(self, tmp_path):
        path = str(tmp_path / "missing.cfg")
        with pytest.raises(utils.CppUMockGenRuntimeError) as e:
            commandline.parse_args(["header1.h", f"--config-file={path}"])
        assert str(e.value).startswith(f"Error opening config file '{path}'")


@pytest.mark.parametrize(
    "argv, expected",
    [
        (["h.h"], ""),
        (["h.h", "-x", "-s", "c++11", "-u"], "-x -s c++11 -u"),
        (["h.h", "-s", "c++ 11"], '-s "c++ 11"'),
        (["h.h", "-t", "f#p=Skip", "-t", "#int=Long"], '-t "f#p=Skip" -t "#int=Long"'),
        (["h.h", "-t", "@Result=Int~static_cast<Result>($)"],
         '-t "@Result=Int~static_cast<Result>($)"'),
        (["h.h", "-I", "foo", "-m", "out"], ""),
    ],
)
def test_get_generation_options(argv, expected):
    args = commandline.parse_args(argv)
    assert commandline.get_generation_options(args) == expected


@pytest.mark.parametrize(
    "value, expected",
    [
        ("c++11", "c++11"),
        ("a b", '"a b"'),
        ('a"b=c', '"a"b=c"'),
        ("a\\b", '"a\\b"'),
        ("a`b", "a`b"),
    ],
)
def test_quote(value, expected):
    assert commandline._quote(value) == expected


def test_get_output_path(tmp_path):
    input_path = os.path.join("foo", "header1.h")
    assert commandline.get_output_path("", input_path, "_mock.cpp") == "header1_mock.cpp"
    assert commandline.get_output_path(str(tmp_path), input_path, "_mock.cpp") == str(
        tmp_path / "header1_mock.cpp"
    )
    assert commandline.get_output_path("out.cpp", input_path, "_mock.cpp") == "out.cpp"


def test_generate_files(tmp_path, set_library_file):
    header = tmp_path / "header1.h"
    header.write_text("int function1(const char *s);\n")
    args = commandline.parse_args(
        [str(header), "-m", str(tmp_path), "-e", str(tmp_path), "-t", "@int=Long"]
    )
    assert commandline.generate(args) == commandline.EXIT_SUCCESS

    mock = (tmp_path / "header1_mock.cpp").read_text()
    assert ' * Generation options: -t "@int=Long"\n' in mock
    assert (
        "// CPPUMOCKGEN_USER_CODE_BEGIN\n// CPPUMOCKGEN_USER_CODE_END\n\n"
    ) in mock
    assert "returnLongIntValue()" in mock

    expect_header = (tmp_path / "header1_expect.hpp").read_text()
    assert ' * Generation options: -t "@int=Long"\n' in expect_header
    assert "namespace expect {\n" in expect_header
    assert "MockExpectedCall& function1(" in expect_header

    expect_impl = (tmp_path / "header1_expect.cpp").read_text()
    assert ' * Generation options: -t "@int=Long"\n' in expect_impl
    assert '#include "header1_expect.hpp"\n' in expect_impl


def test_generate_keeps_user_code(tmp_path, set_library_file):
    header = tmp_path / "header1.h"
    header.write_text("void function1(void);\n")
    mock_path = tmp_path / "header1_mock.cpp"
    mock_path.write_text(
        "/* outdated */\n"
        "// CPPUMOCKGEN_USER_CODE_BEGIN\n"
        "#include <string.h>\n"
        "static int counter;\n"
        "// CPPUMOCKGEN_USER_CODE_END\n"
        "void outdated() {}\n"
    )
    args = commandline.parse_args([str(header), "-m", str(tmp_path)])
    assert commandline.generate(args) == commandline.EXIT_SUCCESS

    mock = mock_path.read_text()
    assert (
        "#include <CppUTestExt/MockSupport.h>\n"
        "\n"
        "// CPPUMOCKGEN_USER_CODE_BEGIN\n"
        "#include <string.h>\n"
        "static int counter;\n"
        "// CPPUMOCKGEN_USER_CODE_END\n"
        "\n"
        "void function1()\n"
    ) in mock
    assert "outdated" not in mock


class TestRegen:
    def test_previous_options_are_used(self, tmp_path, set_library_file):
        header = tmp_path / "header1.h"
        header.write_text("int function1(int i);\n")
        args = commandline.parse_args(
            [str(header), "-m", str(tmp_path), "-t", "@int=Long", "-t", "#int=Double"]
        )
        assert commandline.generate(args) == commandline.EXIT_SUCCESS

        args = commandline.parse_args([str(header), "-m", str(tmp_path), "-r", "-u"])
        assert commandline.generate(args) == commandline.EXIT_SUCCESS
        mock = (tmp_path / "header1_mock.cpp").read_text()
        assert ' * Generation options: -t "@int=Long" -t "#int=Double"\n' in mock
        assert '.withDoubleParameter("i", i).returnLongIntValue()' in mock

    def test_options_from_expectation_header(self, tmp_path):
        expect_header = tmp_path / "header1_expect.hpp"
        expect_header.write_text(
            "/*\n"
            " * This file has been auto-generated by CppUMockGen v0.6.0.\n"
            " *\n"
            " * Contents will NOT be preserved if it is regenerated!!!\n"
            " *\n"
            ' * Generation options: -x -s "gnu++ 14" -t "#int=Long"\n'
            " */\n"
        )
        args = commandline.parse_args(["header1.h", "-e", str(tmp_path), "-r"])
        result = commandline.load_generation_options(args, [None, str(expect_header)])
        assert result.cpp
        assert result.std == "gnu++ 14"
        assert not result.underlying_typedef
        assert result.type_override == ["#int=Long"]
        assert result.expect_output == str(tmp_path)
        assert args.type_override == []

    def test_without_options_line(self, tmp_path):
        mock_path = tmp_path / "header1_mock.cpp"
        mock_path.write_text("/*\n */\n")
        args = commandline.parse_args(["header1.h", "-m", "-x", "-t", "#int=Long", "-r"])
        result = commandline.load_generation_options(args, [str(mock_path)])
        assert not result.cpp
        assert result.type_override == []

    @pytest.mark.parametrize("path", [None, "@", "missing_mock.cpp"])
    def test_no_previous_file(self, path, tmp_path):
        args = commandline.parse_args(["header1.h", "-m", "-r"])
        if path == "missing_mock.cpp":
            path = str(tmp_path / path)
        with pytest.raises(utils.CppUMockGenRuntimeError) as e:
            commandline.load_generation_options(args, [path])
        assert str(e.value).startswith("Regeneration requested")

    def test_generate_without_previous_file(self, tmp_path):
        args = commandline.parse_args(["header1.h", "-m", str(tmp_path), "-r"])
        with pytest.raises(utils.CppUMockGenRuntimeError):
            commandline.generate(args)


def test_generate_to_stdout(tmp_path, capsys, set_library_file):
    header = tmp_path / "header1.h"
    header.write_text("void function1(void);\n")
    args = commandline.parse_args([str(header), "-m", "@"])
    assert commandline.generate(args) == commandline.EXIT_SUCCESS
    assert 'mock().actualCall("function1");' in capsys.readouterr().out
