"""Tests for packagr/collector.py."""

from pathlib import Path

from packagr.collector import (
    CURRENT_PROJECT_SCOPE,
    DependencyPath,
    collect_dependencies,
    dependency_root_patterns,
)
from packagr.config import MicroserviceConfig
from tests.factories import FakePackageManager


def _services(**paths: str) -> dict[str, MicroserviceConfig]:
    return {name: MicroserviceConfig(path=path, packageName=f"@acme/{name}") for name, path in paths.items()}


class TestCollectDependencies:
    """Tests for collect_dependencies ordering and deduplication."""

    def test_current_project_dependencies_are_all_kept(self, tmp_path: Path) -> None:
        root = tmp_path / "api"
        manager = FakePackageManager(
            {
                root: [
                    root,
                    root / "node_modules" / "lodash",
                    root / "node_modules" / "a" / "node_modules" / "debug",
                    root / "node_modules" / "debug",
                ]
            }
        )

        collected = collect_dependencies(root, {}, manager)

        assert [dep.identity for dep in collected] == ["lodash", "a/node_modules/debug", "debug"]
        assert {dep.scope for dep in collected} == {CURRENT_PROJECT_SCOPE}

    def test_lines_without_identity_are_discarded(self, tmp_path: Path) -> None:
        """The project root line printed by npm ls has no identity."""
        root = tmp_path / "api"
        manager = FakePackageManager({root: [root, root / "node_modules" / "uuid"]})

        collected = collect_dependencies(root, {}, manager)

        assert [dep.path for dep in collected] == [root / "node_modules" / "uuid"]

    def test_microservice_dependency_already_in_project_is_skipped(self, tmp_path: Path) -> None:
        root = tmp_path / "api"
        users = tmp_path / "users"
        manager = FakePackageManager(
            {
                root: [root / "node_modules" / "uuid"],
                users: [users / "node_modules" / "uuid", users / "node_modules" / "axios"],
            }
        )

        collected = collect_dependencies(root, _services(users="../users"), manager)

        assert [(dep.scope, dep.identity) for dep in collected] == [(".", "uuid"), ("users", "axios")]
        assert collected[1].path == users / "node_modules" / "axios"

    def test_shared_dependency_belongs_to_first_declared_service(self, tmp_path: Path) -> None:
        """lodash used by A and B is attributed to A only when A is declared first."""
        root = tmp_path / "api"
        a = tmp_path / "a"
        b = tmp_path / "b"
        manager = FakePackageManager(
            {
                a: [a / "node_modules" / "lodash"],
                b: [b / "node_modules" / "lodash", b / "node_modules" / "dayjs"],
            }
        )

        collected = collect_dependencies(root, _services(a="../a", b="../b"), manager)

        lodash = [dep for dep in collected if dep.identity == "lodash"]
        assert len(lodash) == 1
        assert lodash[0].scope == "a"

    def test_declaration_order_decides_attribution(self, tmp_path: Path) -> None:
        root = tmp_path / "api"
        a = tmp_path / "a"
        b = tmp_path / "b"
        manager = FakePackageManager(
            {
                a: [a / "node_modules" / "lodash"],
                b: [b / "node_modules" / "lodash"],
            }
        )

        collected = collect_dependencies(root, _services(b="../b", a="../a"), manager)

        assert [(dep.scope, dep.identity) for dep in collected] == [("b", "lodash")]

    def test_identities_are_unique(self, tmp_path: Path) -> None:
        root = tmp_path / "api"
        services = {name: tmp_path / name for name in ("a", "b", "c")}
        shared = ["lodash", "uuid", "@aws-sdk/client-s3"]
        results = {root: [root / "node_modules" / "uuid"]}
        for directory in services.values():
            results[directory] = [directory / "node_modules" / name for name in shared]
        manager = FakePackageManager(results)

        collected = collect_dependencies(root, _services(a="../a", b="../b", c="../c"), manager)

        identities = [dep.identity for dep in collected]
        assert len(identities) == len(set(identities))
        assert sorted(identities) == sorted(shared)

    def test_queries_run_in_declaration_order(self, tmp_path: Path) -> None:
        root = tmp_path / "api"
        manager = FakePackageManager()

        collect_dependencies(root, _services(z="../z", a="../a"), manager)

        assert manager.calls == [root.resolve(), (tmp_path / "z").resolve(), (tmp_path / "a").resolve()]

    def test_failed_service_query_contributes_nothing(self, tmp_path: Path) -> None:
        root = tmp_path / "api"
        broken = tmp_path / "broken"
        ok = tmp_path / "ok"
        manager = FakePackageManager(
            {broken: [broken / "node_modules" / "left-pad"], ok: [ok / "node_modules" / "left-pad"]},
            failing={broken},
        )

        collected = collect_dependencies(root, _services(broken="../broken", ok="../ok"), manager)

        assert [(dep.scope, dep.identity) for dep in collected] == [("ok", "left-pad")]


class TestDependencyRootPatterns:
    """Tests for dependency_root_patterns."""

    def test_patterns_are_relative_to_project_root(self, tmp_path: Path) -> None:
        root = tmp_path / "api"
        manager = FakePackageManager(
            {
                root: [root / "node_modules" / "uuid"],
                tmp_path / "users": [tmp_path / "users" / "node_modules" / "@scope" / "pkg"],
            }
        )
        collected = collect_dependencies(root, _services(users="../users"), manager)

        patterns = dependency_root_patterns(collected, root)

        assert patterns == ["node_modules/uuid/**", "../users/node_modules/@scope/pkg/**"]

    def test_glob_characters_in_paths_are_escaped(self, tmp_path: Path) -> None:
        root = tmp_path / "api"
        service = tmp_path / "svc[1]"
        collected = [DependencyPath(path=service / "node_modules" / "x", identity="x", scope="svc")]

        assert dependency_root_patterns(collected, root) == ["../svc[[]1]/node_modules/x/**"]
