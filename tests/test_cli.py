"""Tests for the command-line interface, with the oracles replaced by fakes."""

import pytest
from langchain_core.runnables import RunnableLambda

from plan_execute import cli
from plan_execute.graph import get_compiled_graph

from conftest import ScriptedOracle, echo_agent, plan_call, response_call


@pytest.fixture
def fake_graph(monkeypatch):
    def factory(configuration):
        return get_compiled_graph(
            configuration,
            planner=ScriptedOracle({"steps": ["Find the MVP"]}).as_runnable(),
            executor=RunnableLambda(echo_agent),
            replanner=ScriptedOracle(response_call("Stephen Curry, Akron")).as_runnable(),
        )

    monkeypatch.setattr(cli, "get_compiled_graph", factory)


def test_parser_defaults():
    args = cli.build_parser().parse_args(["run"])

    assert args.objective == cli.DEFAULT_OBJECTIVE
    assert args.recursion_limit == 50
    assert args.model is None


def test_run_prints_every_step_and_the_answer(fake_graph, capsys):
    assert cli.main(["run", "Who won?"]) == 0

    out = capsys.readouterr().out
    assert "--- planner ---" in out
    assert "--- agent ---" in out
    assert "--- replan ---" in out
    assert "FINAL ANSWER: Stephen Curry, Akron" in out


def test_run_reports_errors(fake_graph, capsys):
    assert cli.main(["--recursion-limit", "1", "run", "Who won?"]) == 1

    assert "Recursion limit of 1" in capsys.readouterr().err


def test_plan_command(monkeypatch, capsys):
    monkeypatch.setattr(
        cli, "create_planner", lambda configuration: RunnableLambda(lambda inputs: {"steps": ["a", "b"]})
    )

    assert cli.main(["plan", "objective"]) == 0
    assert capsys.readouterr().out.splitlines() == ["1. a", "2. b"]


def test_replan_command(monkeypatch, capsys):
    replanner = ScriptedOracle(plan_call(["b"]))
    monkeypatch.setattr(cli, "create_replanner", lambda configuration: replanner.as_runnable())

    assert cli.main(["replan", "objective", "--step", "b", "--done", "a=1"]) == 0

    assert capsys.readouterr().out.splitlines() == ["CONTINUE:", "1. b"]
    assert replanner.calls == [{"objective": "objective", "plan": "b", "past_steps": "a: 1"}]


def test_replan_command_keeps_spaces_in_completed_steps(monkeypatch, capsys):
    replanner = ScriptedOracle(response_call("Melbourne"))
    monkeypatch.setattr(cli, "create_replanner", lambda configuration: replanner.as_runnable())

    assert cli.main(
        ["replan", "objective", "--step", "Find the hometown", "--done", "Find the winner=Jannik Sinner"]
    ) == 0

    assert capsys.readouterr().out.strip() == "RESPOND: Melbourne"
    assert replanner.calls[0]["past_steps"] == "Find the winner: Jannik Sinner"
    assert "--done \"Find the winner=Jannik Sinner\"" in cli.__doc__


def test_execute_command(monkeypatch, capsys):
    monkeypatch.setattr(cli, "create_executor", lambda configuration: RunnableLambda(echo_agent))

    assert cli.main(["execute", "Who won the US Open?"]) == 0
    assert capsys.readouterr().out.strip() == "done: Who won the US Open?"


def test_model_override_applies_to_every_oracle():
    args = cli.build_parser().parse_args(["--model", "anthropic/claude-3-5-sonnet-20240620", "plan", "x"])

    configuration = cli._configuration(args)

    assert configuration.planner_model == "anthropic/claude-3-5-sonnet-20240620"
    assert configuration.executor_model == "anthropic/claude-3-5-sonnet-20240620"
    assert configuration.replanner_model == "anthropic/claude-3-5-sonnet-20240620"


@pytest.mark.parametrize("value", ["0", "-1", "abc"])
def test_recursion_limit_must_be_a_positive_integer(value, capsys):
    with pytest.raises(SystemExit) as exc_info:
        cli.main(["--recursion-limit", value, "run"])

    assert exc_info.value.code == 2
    assert "--recursion-limit" in capsys.readouterr().err


def test_positive_int():
    assert cli.positive_int("5") == 5
