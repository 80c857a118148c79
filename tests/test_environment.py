from pathlib import Path

from otsdaq_installer.environment import activate_environment, inherit_products_path
from otsdaq_installer.utils.shellenv import ShellEnvironment

from tests.utils import RecordingEngine


def test_activation_order(settings, make_cfg):
    cfg = make_cfg()
    engine = RecordingEngine()
    shell = ShellEnvironment(engine, env={"PATH": "/bin"})
    assert activate_environment(shell, cfg, settings) == []
    bodies = engine.bash_bodies()
    assert bodies[0].strip().endswith(f"source {cfg.products_dir / 'setup'}")
    assert [b.strip().splitlines()[-1] for b in bodies[1:]] == [
        "setup mrb",
        "setup git",
        "setup gitflow",
        "setup nodejs v4_5_0",
    ]


def test_activation_failures_are_ignored(settings, make_cfg):
    engine = RecordingEngine(fail=["setup gitflow", "setup nodejs"])
    shell = ShellEnvironment(engine, env={"PATH": "/bin"})
    assert activate_environment(shell, make_cfg(), settings) == ["gitflow", "nodejs"]
    assert len(engine.calls) == 5


def test_explicit_products_dir_extends_products_path(make_cfg):
    shell = ShellEnvironment(RecordingEngine(), env={"PRODUCTS": "/cvmfs/products"})
    cfg = make_cfg(products_dir=Path("/opt/ups"))
    inherit_products_path(shell, cfg)
    assert shell.env["PRODUCTS"] == "/cvmfs/products:/opt/ups"


def test_default_products_dir_leaves_products_path(make_cfg):
    shell = ShellEnvironment(RecordingEngine(), env={"PRODUCTS": "/cvmfs/products"})
    inherit_products_path(shell, make_cfg())
    assert shell.env["PRODUCTS"] == "/cvmfs/products"
