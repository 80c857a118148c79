from pathlib import Path

import pytest
from pydantic import ValidationError

from otsdaq_installer.models import InstallConfig, ResolvedVersions, normalise_packages


def test_defaults(tmp_path):
    """No flags: prof build, demo package, master tag, read-only, no core sources."""
    cfg = InstallConfig.from_options(base_dir=tmp_path)
    assert cfg.build_type == "prof"
    assert cfg.packages == frozenset({"demo"})
    assert cfg.tag == "master"
    assert cfg.write_mode is False
    assert cfg.download_srcs is False
    assert cfg.products_dir == tmp_path.resolve() / "products"
    assert cfg.products_dir_given is False


def test_relative_products_dir_is_anchored_at_base(tmp_path):
    cfg = InstallConfig.from_options(base_dir=tmp_path, products_dir=Path("ups"))
    assert cfg.products_dir == tmp_path.resolve() / "ups"
    assert cfg.products_dir_given is True


def test_package_list_strips_prefix_and_whitespace():
    assert normalise_packages(" otsdaq_demo, cmsoutertracker ,,") == frozenset(
        {"demo", "cmsoutertracker"}
    )


@pytest.mark.parametrize("build_type", ["release", "Prof", "", "opt"])
def test_unknown_build_type_rejected(tmp_path, build_type):
    with pytest.raises(ValidationError) as exc:
        InstallConfig.from_options(base_dir=tmp_path, build_type=build_type)
    assert "prof, debug" in str(exc.value)


@pytest.mark.parametrize("packages", ["artdaq", "demo,bogus", "otsdaq_nope"])
def test_unknown_package_rejected(tmp_path, packages):
    with pytest.raises(ValidationError) as exc:
        InstallConfig.from_options(base_dir=tmp_path, packages=packages)
    assert "demo, cmsoutertracker" in str(exc.value)


def test_config_is_immutable(tmp_path):
    cfg = InstallConfig.from_options(base_dir=tmp_path)
    with pytest.raises(ValidationError):
        cfg.tag = "develop"


def test_resolved_version_helpers():
    v = ResolvedVersions(
        tag="v2_02_00",
        demo_version="v2_02_00",
        otsdaq_version="v2_02_01",
        utilities_version="v2_02_02",
        default_qualifier="e15:s64",
        e_qualifier="e15",
        s_qualifier="s64",
    )
    assert v.qualifier_pair == "s64-e15"
    assert v.bundle == "otsdaq-v2_02_01"
    assert v.mrb_qualifiers("debug") == "e15:s64:debug"
    assert v.local_products_name("otsdaq_demo", "prof") == (
        "localProducts_otsdaq_demo_v2_02_00_e15_s64_prof"
    )
