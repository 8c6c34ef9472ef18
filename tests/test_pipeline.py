"""Integration tests for manifest discovery and deployment."""
import os
import shutil

import pytest

from layout.core.errors import ManifestError, VersionMismatch
from layout.core.manifest_loader import ManifestLoader, load_manifest
from layout.core.pipeline import DeployConfig, deploy, render_to, select_manifest

requires_sh = pytest.mark.skipif(shutil.which("sh") is None, reason="requires a POSIX shell")


class TestManifestLoader:
    """Test discovery of layout.yaml files."""

    def test_find_stops_at_manifest(self, write_manifest, tmp_path):
        write_manifest("alpha", "title: Alpha\n")
        write_manifest("beta", "description: no title\n")
        write_manifest("beta/nested", "title: Hidden\n")

        loader = ManifestLoader(tmp_path)
        manifests = loader.find_manifests()

        assert manifests == [tmp_path / "alpha" / "layout.yaml", tmp_path / "beta" / "layout.yaml"]
        assert loader.titles(manifests) == ["Alpha", "beta"]

    def test_root_manifest_hides_everything_below(self, write_manifest, tmp_path):
        write_manifest(".", "title: Root\n")
        write_manifest("sub", "title: Sub\n")
        assert ManifestLoader(tmp_path).find_manifests() == [tmp_path / "layout.yaml"]

    def test_invalid_manifest(self, write_manifest):
        path = write_manifest("bad", "prompts:\n  - label: neither var nor include\n")
        with pytest.raises(ManifestError, match="invalid manifest"):
            load_manifest(path)

    def test_manifest_must_be_mapping(self, write_manifest):
        path = write_manifest("bad", "- just\n- a list\n")
        with pytest.raises(ManifestError, match="must be a mapping"):
            load_manifest(path)


class TestSelectManifest:
    """Test choosing among several manifests."""

    def test_no_manifests(self, tmp_path, make_ui):
        with pytest.raises(ManifestError, match="no manifests files discovered"):
            select_manifest(ManifestLoader(tmp_path), make_ui(), [])

    def test_single_manifest_no_question(self, write_manifest, tmp_path, make_ui):
        path = write_manifest("only", "title: Only\n")
        ui = make_ui("")
        assert select_manifest(ManifestLoader(tmp_path), ui, [path]) == path
        assert ui.out.getvalue() == ""

    def test_pick_by_title(self, write_manifest, tmp_path, make_ui):
        write_manifest("alpha", "title: Alpha\n")
        beta = write_manifest("beta", "title: Beta\n")
        loader = ManifestLoader(tmp_path)

        ui = make_ui("2\n")
        assert select_manifest(loader, ui, loader.find_manifests()) == beta
        assert "Which to use" in ui.out.getvalue()

    def test_default_is_first(self, write_manifest, tmp_path, make_ui):
        alpha = write_manifest("alpha", "title: Alpha\n")
        write_manifest("beta", "title: Beta\n")
        loader = ManifestLoader(tmp_path)
        assert select_manifest(loader, make_ui("\n"), loader.find_manifests()) == alpha


class TestRenderTo:
    """Test the render pipeline on small manifests."""

    def test_order_of_phases(self, ctx, write_manifest, tmp_path, make_ui):
        manifest_file = write_manifest("tpl", """
default:
  - var: greeting
    value: hello
computed:
  - var: message
    value: "{{ greeting }} {{ who }} from {{ dirname }}"
prompts:
  - var: who
    default: world
""", {"out.txt": "{{ message }}\n"})

        target = tmp_path / "dest" / "my-app"
        state = render_to(ctx, load_manifest(manifest_file), manifest_file, target, make_ui("\n"))

        assert state["dirname"] == "my-app"
        assert (target / "out.txt").read_text() == "hello world from my-app\n"

    def test_global_values_override_defaults(self, ctx, write_manifest, tmp_path, make_ui):
        manifest_file = write_manifest("tpl", """
default:
  - var: author
    value: nobody
prompts:
  - var: email
    default: "{{ author }}@example.com"
""", {"AUTHORS": "{{ author }} <{{ email }}>"})

        target = tmp_path / "dest"
        render_to(ctx, load_manifest(manifest_file), manifest_file, target, make_ui("\n"),
                  defaults={"author": "alice"})

        assert (target / "AUTHORS").read_text() == "alice <alice@example.com>"

    def test_custom_delimiters(self, ctx, write_manifest, tmp_path, make_ui):
        manifest_file = write_manifest("tpl", """
delimiters:
  open: "[["
  close: "]]"
prompts:
  - var: name
""", {"[[ name ]].txt": "name=[[ name ]] raw={{ keep }}"})

        target = tmp_path / "dest"
        render_to(ctx, load_manifest(manifest_file), manifest_file, target, make_ui("app\n"))

        assert (target / "app.txt").read_text() == "name=app raw={{ keep }}"

    def test_missing_content_dir(self, ctx, write_manifest, tmp_path, make_ui):
        manifest_file = write_manifest("tpl", "title: Empty\n")
        target = tmp_path / "dest"
        render_to(ctx, load_manifest(manifest_file), manifest_file, target, make_ui())
        assert target.is_dir()
        assert os.listdir(target) == []


@requires_sh
class TestDeploy:
    """End-to-end runs against tests/data/projectA."""

    def test_defaults_only(self, project_a, tmp_path, make_ui):
        target = tmp_path / "out" / "svc"
        ui = make_ui("\n\n\n")

        state = deploy(DeployConfig(source=str(project_a), target=target, display=ui, version="0.1.0"))

        assert state["name"] == "demo"
        assert state["port"] == 8080
        assert state["features"] == ["docker"]
        assert "ci_provider" not in state

        assert (target / "README.md").read_text() == (
            "# demo\n\nDirectory: svc\nPort: 8080\nAuthor: nobody\n"
        )
        assert (target / "demo" / "main.txt").read_text() == "image=demo:latest\n"
        assert (target / "Dockerfile").read_text() == "FROM alpine\nEXPOSE 8080\n"
        assert (target / "template.raw").read_text() == "{{ not_rendered }}\n"
        assert (target / "before.txt").read_text() == "prepared demo\n"
        assert (target / "after.txt").read_text() == "demo\nport 8080\n"

        output = ui.out.getvalue()
        assert "Sample service" in output
        assert "[info] Prepare workspace" in output
        assert "[info] Finish" in output

    def test_answers_and_include(self, project_a, tmp_path, make_ui):
        target = tmp_path / "svc"
        ui = make_ui("My Service\n9000\n2\n2\nno\n")

        state = deploy(DeployConfig(source=str(project_a), target=target, display=ui, version="0.1.0"))

        assert state["features"] == ["ci"]
        assert state["ci_provider"] == "gitlab"
        assert state["ci_cache"] is False
        assert state["dockerfile"] == ""
        assert (target / "My Service" / "main.txt").read_text() == "image=my-service:latest\n"
        assert not any(name.startswith("{{") for name in os.listdir(target))
        assert sorted(os.listdir(target)) == [
            "My Service", "README.md", "after.txt", "before.txt", "template.raw",
        ]

    def test_version_mismatch(self, project_a, tmp_path, make_ui):
        target = tmp_path / "svc"
        with pytest.raises(VersionMismatch, match="requires another version"):
            deploy(DeployConfig(source=str(project_a), target=target, display=make_ui(), version="2.0.0"))
        assert not target.exists()

    def test_no_manifest(self, tmp_path, make_ui):
        source = tmp_path / "empty"
        source.mkdir()
        with pytest.raises(ManifestError, match="no manifests files discovered"):
            deploy(DeployConfig(source=str(source), target=tmp_path / "svc", display=make_ui()))

    def test_multiple_manifests(self, project_a, tmp_path, make_ui):
        source = tmp_path / "collection"
        shutil.copytree(project_a, source / "service")
        (source / "other").mkdir()
        (source / "other" / "layout.yaml").write_text("title: Other\n")

        target = tmp_path / "svc"
        ui = make_ui("2\n\n\n\n")
        state = deploy(DeployConfig(source=str(source), target=target, display=ui, version="0.1.0"))

        output = ui.out.getvalue()
        assert "1 - Other" in output
        assert "2 - Sample service" in output
        assert state["name"] == "demo"
        assert (target / "README.md").exists()
