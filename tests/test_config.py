"""Tests for kube-ui constants."""

from kube_ui.config import (
    CONFIGMAP_ACTIONS,
    EXIT,
    MAIN_ACTIONS,
    POD_ACTIONS,
    PVC_ACTIONS,
    SHELLS,
    SVC_ACTIONS,
    TUNNEL_SUFFIX_ALPHABET,
)


def test_every_menu_can_exit():
    """Every menu offers exit, listed last."""
    assert MAIN_ACTIONS[-1] == EXIT
    for actions in (POD_ACTIONS, SVC_ACTIONS, PVC_ACTIONS, CONFIGMAP_ACTIONS):
        assert list(actions)[-1] == EXIT


def test_main_actions():
    """Main menu actions, in display order."""
    assert MAIN_ACTIONS == ["pods", "svc", "pvc", "configmap", "tunnel", "exit"]


def test_pod_actions():
    """Pod actions, in display order."""
    assert list(POD_ACTIONS) == ["p", "l", "lf", "s", "e", "fw", "cp", "u", "exit"]


def test_bash_before_sh():
    """bash is tried before sh."""
    assert SHELLS == ["/bin/bash", "/bin/sh"]


def test_suffix_alphabet_is_dns_safe():
    """Pod name suffixes use lowercase letters and digits only."""
    assert set(TUNNEL_SUFFIX_ALPHABET) == set("abcdefghijklmnopqrstuvwxyz0123456789")
