"""Tests for the interactive flows, with prompts and commands faked."""

import json

import pytest

from clustercost import cluster, flows, prompts
from clustercost.errors import CommandError, OperationCancelledError
from clustercost.helm import build_dashboard_helm_args
from clustercost.state import EMPTY_STATE, InstallState, ReleaseInfo

INSTALLED = InstallState(agent=ReleaseInfo(namespace="team-a"), dashboard=ReleaseInfo(namespace="team-a"))
NOT_FOUND = CommandError("helm status", code=1, stderr="release: not found")


class Answers:
    """Scripted answers for the prompt helpers used by the flows."""

    def __init__(self, monkeypatch, confirms=(), selects=(), namespace="clustercost"):
        self.confirms = list(confirms)
        self.selects = list(selects)
        self.namespace = namespace
        self.questions: list[str] = []
        monkeypatch.setattr(prompts, "ask_confirm", self.confirm)
        monkeypatch.setattr(prompts, "ask_select", self.select)
        monkeypatch.setattr(prompts, "ask_namespace", self.ask_namespace)

    def confirm(self, message, default=True):
        self.questions.append(message)
        return self.confirms.pop(0)

    def select(self, message, options, default=None):
        self.questions.append(message)
        return self.selects.pop(0)

    def ask_namespace(self, message, default):
        self.questions.append(message)
        return self.namespace


def test_menu_without_install() -> None:
    options = flows.build_menu_options(EMPTY_STATE)
    assert [value for _, value in options] == ["install", "about", "exit"]
    assert flows.initial_menu_value(EMPTY_STATE, options) == "install"


def test_menu_with_install() -> None:
    options = flows.build_menu_options(INSTALLED)
    assert [value for _, value in options] == ["port-forward", "install", "uninstall", "debug", "about", "exit"]
    assert options[0][0] == "Launch dashboard (port-forward · ns: team-a)"
    assert options[1][0] == "Upgrade ClusterCost (agent + dashboard)"
    assert flows.initial_menu_value(INSTALLED, options) == "port-forward"


def test_fresh_install(fake_run, monkeypatch) -> None:
    answers = Answers(monkeypatch, confirms=[True], namespace="team-a")
    fake_run.on("kubectl", "config", "current-context", result="kind-dev")
    fake_run.on("helm", "status", result=NOT_FOUND)
    fake_run.on("kubectl", "get", "namespace", result=CommandError("kubectl get namespace", code=1))
    fake_run.on("helm", "repo", "list", result="[]")
    fake_run.on(
        "helm", "list", "-A", result=json.dumps([{"name": "clustercost-agent", "namespace": "team-a"}])
    )

    state = flows.install_flow(EMPTY_STATE)

    assert answers.questions[0] == "We detected Kubernetes context: kind-dev. Install ClusterCost here?"
    assert ["kubectl", "create", "namespace", "team-a"] in fake_run.calls
    assert fake_run.ran("helm", "repo", "add", "clustercost")
    agent_call = ["helm", "upgrade", "--install", "clustercost-agent", "clustercost/clustercost-agent-k8s",
                  "-n", "team-a", "--create-namespace"]
    dashboard_call = ["helm", *build_dashboard_helm_args("team-a")]
    assert fake_run.calls.index(agent_call) < fake_run.calls.index(dashboard_call)
    assert fake_run.calls[-1] == ["helm", "list", "-A", "-o", "json"]
    assert state.agent.namespace == "team-a"


def test_install_switches_context(fake_run, monkeypatch) -> None:
    Answers(monkeypatch, confirms=[False], selects=["prod"])
    fake_run.on("kubectl", "config", "current-context", result="kind-dev")
    fake_run.on("kubectl", "config", "get-contexts", result="kind-dev\nprod\n")
    fake_run.on("helm", "status", result=NOT_FOUND)

    flows.install_flow(EMPTY_STATE)

    assert ["kubectl", "config", "use-context", "prod"] in fake_run.calls


def test_install_same_context_does_not_switch(fake_run, monkeypatch) -> None:
    Answers(monkeypatch, confirms=[False], selects=["kind-dev"])
    fake_run.on("kubectl", "config", "current-context", result="kind-dev")
    fake_run.on("kubectl", "config", "get-contexts", result="kind-dev\nprod\n")
    fake_run.on("helm", "status", result=NOT_FOUND)

    flows.install_flow(EMPTY_STATE)

    assert not fake_run.ran("kubectl", "config", "use-context")


def test_reinstall_declined_leaves_releases(fake_run, monkeypatch) -> None:
    answers = Answers(monkeypatch, confirms=[False], namespace="team-a")
    fake_run.on("kubectl", "config", "current-context", result="kind-dev")

    state = flows.install_flow(INSTALLED)

    assert state is INSTALLED
    assert answers.questions[-1] == (
        "ClusterCost agent + dashboard already detected in team-a. "
        "Reinstall and upgrade the existing release?"
    )
    assert not fake_run.ran("helm", "upgrade")


def test_reinstall_confirmed_upgrades(fake_run, monkeypatch) -> None:
    Answers(monkeypatch, confirms=[True], namespace="team-a")
    fake_run.on("helm", "repo", "list", result='[{"name": "clustercost"}]')

    flows.install_flow(INSTALLED)

    assert ["helm", *build_dashboard_helm_args("team-a")] in fake_run.calls
    assert not fake_run.ran("kubectl", "create", "namespace")


def test_uninstall_declined(fake_run, monkeypatch) -> None:
    Answers(monkeypatch, confirms=[False])
    assert flows.uninstall_flow(INSTALLED) is INSTALLED
    assert fake_run.calls == []


def test_uninstall_confirmed(fake_run, monkeypatch) -> None:
    Answers(monkeypatch, confirms=[True], namespace="team-a")
    fake_run.on("helm", "status", "clustercost-dashboard", result=NOT_FOUND)
    fake_run.on("helm", "list", result="[]")

    state = flows.uninstall_flow(INSTALLED)

    assert ["helm", "uninstall", "clustercost-agent", "-n", "team-a"] in fake_run.calls
    assert not fake_run.ran("helm", "uninstall", "clustercost-dashboard")
    assert state == EMPTY_STATE


def test_port_forward_flow(monkeypatch) -> None:
    Answers(monkeypatch, namespace="team-a")
    monkeypatch.setattr(prompts, "ask_service_name", lambda: "my-dashboard")
    monkeypatch.setattr(prompts, "ask_port", lambda message, default: 4000)
    seen = []
    monkeypatch.setattr(cluster, "establish_port_forward", lambda *args: seen.append(args))

    assert flows.port_forward_flow(INSTALLED) is INSTALLED
    assert seen == [("team-a", "my-dashboard", 4000)]


def test_debug_flow(fake_run, capsys) -> None:
    fake_run.on("kubectl", "config", "current-context", result="kind-dev")
    fake_run.on("helm", "version", result=CommandError("helm version", code=1, stderr="helm broken"))

    flows.debug_flow(EMPTY_STATE)

    out = capsys.readouterr().out
    assert "=== Debug info ===" in out
    assert "Context: kind-dev" in out
    assert "helm broken" in out
    assert fake_run.ran("helm", "list", "-n", "clustercost")


def test_run_menu_until_exit(monkeypatch) -> None:
    answers = Answers(monkeypatch, selects=["about", "exit"])
    assert flows.run_menu(EMPTY_STATE) is EMPTY_STATE
    assert answers.questions == ["What would you like to do?", "What would you like to do?"]


def test_run_menu_threads_state(monkeypatch) -> None:
    Answers(monkeypatch, selects=["install", "exit"])
    monkeypatch.setitem(flows.FLOWS, "install", lambda state: INSTALLED)
    assert flows.run_menu(EMPTY_STATE) is INSTALLED


def test_run_menu_cancelled(monkeypatch) -> None:
    def cancel(*args, **kwargs):
        raise OperationCancelledError()

    monkeypatch.setattr(prompts, "ask_select", cancel)
    with pytest.raises(OperationCancelledError):
        flows.run_menu(EMPTY_STATE)
