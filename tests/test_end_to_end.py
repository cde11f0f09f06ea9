"""End-to-end test of the workflow against real git with stand-in gh and cargo tools."""

import io
import shutil
import stat
import sys
import textwrap
from pathlib import Path

import git
import pytest
from rich.console import Console

from create_rust_github_repo.execution import CommandForwarder
from create_rust_github_repo.models import Settings, WorkflowConfig
from create_rust_github_repo.workflow import STEPS, WorkflowRunner

pytestmark = pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")


FAKE_GH = '''
import subprocess
import sys
from pathlib import Path

REMOTES = Path({remotes!r})

args = sys.argv[1:]
if args[:2] == ["repo", "view"]:
    sys.exit(0 if (REMOTES / (args[2] + ".git")).exists() else 1)
if args[:2] == ["repo", "create"]:
    subprocess.run(["git", "init", "--bare", "--quiet", str(REMOTES / (args[2] + ".git"))], check=True)
    print("Created repository " + args[2])
    sys.exit(0)
if args[:2] == ["repo", "clone"]:
    sys.exit(subprocess.run(["git", "clone", "--quiet", str(REMOTES / (args[2] + ".git")), args[3], *args[4:]]).returncode)
print("unsupported: " + " ".join(args), file=sys.stderr)
sys.exit(2)
'''

FAKE_CARGO = '''
import sys
from pathlib import Path

args = sys.argv[1:]
if args[:1] == ["init"]:
    name = Path.cwd().name
    Path("Cargo.toml").write_text('[package]\\nname = "%s"\\nversion = "0.1.0"\\n' % name)
    Path("src").mkdir(exist_ok=True)
    if "--lib" in args:
        Path("src/lib.rs").write_text("pub fn it_works() {}\\n")
    else:
        Path("src/main.rs").write_text('fn main() {\\n    println!("Hello, world!");\\n}\\n')
    sys.exit(0)
if args[:1] == ["build"]:
    print("   Compiling (fake)")
    sys.exit(0)
sys.exit(2)
'''


def write_tool(path: Path, body: str) -> Path:
    """Write an executable Python script run by the current interpreter."""
    path.write_text(f"#!{sys.executable}\n" + textwrap.dedent(body))
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


@pytest.fixture
def tools(tmp_path, monkeypatch):
    """Install fake gh and cargo executables and a directory for bare remotes."""
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    remotes = tmp_path / "remotes"
    remotes.mkdir()

    for var, value in {
        "GIT_AUTHOR_NAME": "Test User",
        "GIT_AUTHOR_EMAIL": "test@example.com",
        "GIT_COMMITTER_NAME": "Test User",
        "GIT_COMMITTER_EMAIL": "test@example.com",
    }.items():
        monkeypatch.setenv(var, value)

    settings = Settings(
        _env_file=None,
        gh_bin=str(write_tool(bin_dir / "gh", FAKE_GH.format(remotes=str(remotes)))),
        cargo_bin=str(write_tool(bin_dir / "cargo", FAKE_CARGO)),
        git_bin="git",
    )
    return settings, remotes


@pytest.fixture
def config_source(tmp_path):
    source = tmp_path / "cfg"
    (source / "lint").mkdir(parents=True)
    (source / "ci.yml").write_text("on: [push]\njobs: {}\n")
    (source / "lint" / ".rc").write_text("deny-warnings = true\n")
    return source


@pytest.mark.skipif(sys.platform == "win32", reason="fake tools rely on shebang scripts")
class TestEndToEnd:
    """Runs the whole workflow with a local bare repository as the remote."""

    def test_creates_clones_copies_commits_and_pushes(self, tmp_path, tools, config_source):
        settings, remotes = tools
        target = tmp_path / "demo"
        config = WorkflowConfig(
            name="demo",
            copy_configs_from=config_source,
            dir=target,
            configs=["ci.yml"],
            extra_configs=["lint/.rc"],
            push_args=["--set-upstream", "origin", "HEAD"],
        )
        config.validate_environment(tmp_path)
        runner = WorkflowRunner(
            config,
            settings=settings,
            forwarder=CommandForwarder(stdout=io.StringIO(), stderr=io.StringIO()),
            console=Console(file=io.StringIO()),
            cwd=tmp_path,
        )

        result = runner.run()

        assert result.success, result.failed_step
        assert result.completed_steps == list(STEPS)

        assert (target / "ci.yml").read_text() == "on: [push]\njobs: {}\n"
        assert (target / "lint" / ".rc").read_text() == "deny-warnings = true\n"
        assert (target / "Cargo.toml").exists()

        local = git.Repo(target)
        assert local.head.commit.message.strip() == "Add configs"
        committed = {item.path for item in local.head.commit.tree.traverse()}
        assert {"ci.yml", "lint/.rc", "Cargo.toml", "src/main.rs"} <= committed

        remote = git.Repo(remotes / "demo.git")
        assert remote.head.commit.hexsha == local.head.commit.hexsha

    def test_rerun_resumes_without_recreating(self, tmp_path, tools, config_source):
        """Test a second run skips create, clone and init and commits new configs."""
        settings, remotes = tools
        target = tmp_path / "demo"

        def run(**overrides):
            config = WorkflowConfig(
                name="demo",
                copy_configs_from=config_source,
                dir=target,
                configs=["ci.yml"],
                push_args=["--set-upstream", "origin", "HEAD"],
                **overrides,
            )
            return WorkflowRunner(
                config,
                settings=settings,
                forwarder=CommandForwarder(stdout=io.StringIO(), stderr=io.StringIO()),
                console=Console(file=io.StringIO()),
                cwd=tmp_path,
            ).run()

        assert run().success

        second = run(extra_configs=["lint/.rc"], commit_message="Add lint config")

        assert second.success, second.failed_step
        skipped = [step.step for step in second.steps if step.skipped]
        assert skipped == ["repo-create", "repo-clone", "project-init"]
        assert git.Repo(target).head.commit.message.strip() == "Add lint config"
        assert git.Repo(remotes / "demo.git").head.commit.message.strip() == "Add lint config"

    def test_failed_clone_leaves_created_repo(self, tmp_path, tools, config_source):
        """Test a failure after creation keeps the remote and stops the run."""
        settings, remotes = tools
        config = WorkflowConfig(
            name="demo",
            copy_configs_from=config_source,
            dir=tmp_path / "demo",
            configs=["ci.yml"],
            repo_clone_args=["--no-such-git-flag"],
        )
        runner = WorkflowRunner(
            config,
            settings=settings,
            forwarder=CommandForwarder(stdout=io.StringIO(), stderr=io.StringIO()),
            console=Console(file=io.StringIO()),
            cwd=tmp_path,
        )

        result = runner.run()

        assert result.failed_step.step == "repo-clone"
        assert result.failed_step.returncode != 0
        assert result.completed_steps == ["repo-create"]
        assert (remotes / "demo.git").exists()
        assert not (tmp_path / "demo" / "ci.yml").exists()
