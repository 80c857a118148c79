import subprocess

import pytest

from otsdaq_installer.checkout import checkout_sources, describe_package
from otsdaq_installer.engines import Policy
from otsdaq_installer.hooks import HOOKS, hooks_for
from otsdaq_installer.models import ResolvedVersions
from otsdaq_installer.utils.shellenv import ShellEnvironment

from tests.utils import RecordingEngine

VERSIONS = ResolvedVersions(
    tag="develop",
    demo_version="v2_02_00",
    otsdaq_version="v2_02_01",
    utilities_version="v2_02_02",
    default_qualifier="e15:s64",
    e_qualifier="e15",
    s_qualifier="s64",
)


def _checkouts(engine):
    return [c for c in engine.calls if c.args[:2] == ["mrb", "gitCheckout"]]


def _run(tmp_path, settings, cfg, **engine_kw):
    engine = RecordingEngine(extra_env={"MRB_SOURCE": str(tmp_path / "srcs")}, **engine_kw)
    shell = ShellEnvironment(engine, env={"PATH": "/bin"})
    report = checkout_sources(shell, cfg, VERSIONS, settings)
    return engine, shell, report


def test_package_descriptor_remotes(settings, make_cfg):
    anon = describe_package("demo", make_cfg(), settings)
    assert (anon.branch, anon.name, anon.remote) == (
        "develop",
        "otsdaq_demo",
        "http://cdcvs.fnal.gov/projects/otsdaq-demo",
    )
    auth = describe_package("cmsoutertracker", make_cfg(write_mode=True), settings)
    assert auth.remote == "ssh://p-otsdaq@cdcvs.fnal.gov/cvs/projects/otsdaq-cmsoutertracker"


def test_workspace_is_created_with_mrb_newdev(tmp_path, settings, make_cfg):
    cfg = make_cfg(build_type="debug")
    engine, shell, report = _run(tmp_path, settings, cfg)
    newdev = engine.find("mrb newDev")[0]
    assert newdev.args == ["mrb", "newDev", "-f", "-v", "v2_02_00", "-q", "e15:s64:debug"]
    assert newdev.env["MRB_PROJECT"] == "otsdaq_demo"
    assert any(
        "localProducts_otsdaq_demo_v2_02_00_e15_s64_debug/setup" in body
        for body in engine.bash_bodies()
    )
    assert report.srcs_dir == tmp_path / "srcs"


def test_default_run_checks_out_demo_only(tmp_path, settings, make_cfg):
    engine, _, report = _run(tmp_path, settings, make_cfg())
    first, second = _checkouts(engine)
    url = "http://cdcvs.fnal.gov/projects/otsdaq-demo"
    assert first.args == ["mrb", "gitCheckout", "-d", "otsdaq_demo", url]
    assert first.policy is Policy.FATAL
    assert second.args == ["mrb", "gitCheckout", "-b", "develop", "-d", "otsdaq_demo", url]
    assert second.policy is Policy.BEST_EFFORT
    assert first.cwd == tmp_path / "srcs"
    assert report.repositories == ["otsdaq_demo"]
    assert report.hooks == []


def test_core_repositories_with_srcs_flag(tmp_path, settings, make_cfg):
    engine, _, report = _run(tmp_path, settings, make_cfg(download_srcs=True, packages=""))
    lines = [c.line for c in _checkouts(engine)]
    assert lines == [
        "mrb gitCheckout -b develop -d otsdaq_utilities http://cdcvs.fnal.gov/projects/otsdaq-utilities",
        "mrb gitCheckout -b develop -d otsdaq http://cdcvs.fnal.gov/projects/otsdaq",
        "mrb gitCheckout -b develop -d otsdaq_components http://cdcvs.fnal.gov/projects/otsdaq-components",
    ]
    assert report.repositories == ["otsdaq_utilities", "otsdaq", "otsdaq_components"]


def test_write_mode_uses_authenticated_remotes_everywhere(tmp_path, settings, make_cfg):
    cfg = make_cfg(download_srcs=True, packages="demo,cmsoutertracker", write_mode=True)
    engine, _, _ = _run(tmp_path, settings, cfg)
    urls = [c.args[-1] for c in _checkouts(engine)]
    assert len(urls) == 3 + 2 * 2
    assert all(u.startswith("ssh://p-otsdaq@cdcvs.fnal.gov/cvs/projects/") for u in urls)


def test_read_only_mode_uses_anonymous_remotes_everywhere(tmp_path, settings, make_cfg):
    cfg = make_cfg(download_srcs=True, packages="demo,cmsoutertracker")
    engine, _, _ = _run(tmp_path, settings, cfg)
    urls = [c.args[-1] for c in _checkouts(engine)]
    assert all(u.startswith("http://cdcvs.fnal.gov/projects/") for u in urls)


def test_cmsoutertracker_hook_runs_once_after_all_checkouts(tmp_path, settings, make_cfg):
    cfg = make_cfg(packages="cmsoutertracker,demo")
    engine, _, report = _run(tmp_path, settings, cfg)
    last_checkout = max(i for i, c in enumerate(engine.calls) if c.args[:2] == ["mrb", "gitCheckout"])
    git_calls = [(i, c) for i, c in enumerate(engine.calls) if c.args[0] == "git"]
    assert [c.args for _, c in git_calls] == [
        ["git", "submodule", "init"],
        ["git", "submodule", "update"],
        ["git", "fetch"],
    ]
    assert all(i > last_checkout for i, _ in git_calls)
    pkg_dir = tmp_path / "srcs" / "otsdaq_cmsoutertracker"
    assert git_calls[0][1].cwd == pkg_dir
    assert git_calls[2][1].cwd == pkg_dir / "otsdaq-cmsoutertracker" / "Ph2_ACF"
    assert report.hooks == ["cmsoutertracker"]


def test_tolerated_branch_checkout_failure(tmp_path, settings, make_cfg):
    engine, _, report = _run(tmp_path, settings, make_cfg(), fail=["-b develop -d otsdaq_demo"])
    assert report.repositories == ["otsdaq_demo"]


def test_first_checkout_failure_aborts(tmp_path, settings, make_cfg):
    with pytest.raises(subprocess.CalledProcessError):
        _run(tmp_path, settings, make_cfg(), fail=["gitCheckout -d otsdaq_demo"])


def test_hook_failure_aborts(tmp_path, settings, make_cfg):
    with pytest.raises(subprocess.CalledProcessError):
        _run(tmp_path, settings, make_cfg(packages="cmsoutertracker"), fail=["submodule update"])


def test_hook_registry():
    assert set(HOOKS) == {"cmsoutertracker"}
    assert hooks_for(["demo"]) == []
    assert hooks_for(["demo", "cmsoutertracker"]) == ["cmsoutertracker"]
