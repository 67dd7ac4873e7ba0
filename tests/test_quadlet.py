"""Tests for the compose2podman Quadlet generator."""

import os
import stat

import pytest

from compose2podman.config import ConverterConfig
from compose2podman.errors import OutputDirectoryError, UnitFileError
from compose2podman.quadlet import (
    QuadletGenerator,
    generate_quadlet_files,
    map_restart_policy,
    render_container_unit,
    render_network_unit,
    render_volume_unit,
)
from compose2podman.types import ComposeFile, ComposeNetwork, ComposeService, ComposeVolume


@pytest.fixture
def compose():
    """Compose document with networks, volumes and dependent services."""
    return ComposeFile.from_dict({
        "services": {
            "web": {
                "image": "nginx:alpine",
                "ports": ["8080:80"],
                "networks": ["frontend"],
                "depends_on": {"api": {"condition": "service_started"}},
                "restart": "unless-stopped",
            },
            "api": {
                "image": "myapi:v1",
                "environment": {"DATABASE_URL": "postgres://db:5432/app"},
                "networks": {"frontend": {}, "backend": {}},
                "depends_on": ["db"],
                "restart": "on-failure",
            },
            "db": {
                "image": "postgres:15",
                "volumes": ["db-data:/var/lib/postgresql/data", "./init:/docker-entrypoint-initdb.d:ro"],
                "networks": ["backend"],
                "restart": "no",
            },
        },
        "networks": {
            "frontend": {},
            "backend": {"driver": "bridge", "labels": {"tier": "data"}},
        },
        "volumes": {
            "db-data": {"driver": "local"},
        },
    })


class RecordingWriter:
    """Writer collecting files in memory."""

    def __init__(self):
        self.files = {}

    def __call__(self, path, content):
        self.files[path.name] = content


class TestMapRestartPolicy:
    @pytest.mark.parametrize("token,expected", [
        ("no", "no"),
        ("always", "always"),
        ("on-failure", "on-failure"),
        ("unless-stopped", "always"),
        ("sometimes", "always"),
        ("", "always"),
        (None, "always"),
    ])
    def test_mapping(self, token, expected):
        assert map_restart_policy(token) == expected


class TestRenderContainerUnit:
    def test_dependencies(self, compose):
        content = render_container_unit("api", compose.services["api"])

        assert "After=db.service\n" in content
        assert "Requires=db.service\n" in content

    def test_dependencies_from_mapping(self, compose):
        content = render_container_unit("web", compose.services["web"])

        assert "After=api.service\n" in content
        assert "Requires=api.service\n" in content

    def test_multiple_dependencies(self):
        svc = ComposeService.from_dict("app", {"image": "app", "depends_on": ["db", "cache"]})
        content = render_container_unit("app", svc)

        assert "After=db.service cache.service\n" in content
        assert "Requires=db.service cache.service\n" in content

    def test_no_dependencies(self, compose):
        content = render_container_unit("db", compose.services["db"])
        assert "After=" not in content
        assert "Requires=" not in content

    def test_sections(self, compose):
        content = render_container_unit("web", compose.services["web"])

        assert content.startswith("[Unit]\nDescription=web container\n")
        assert "\n[Container]\n" in content
        assert "\n[Service]\nRestart=always\nTimeoutStartSec=900\n" in content
        assert content.endswith("\n[Install]\nWantedBy=default.target\n")

    def test_container_fields(self, compose):
        content = render_container_unit("api", compose.services["api"])

        assert "Image=myapi:v1\n" in content
        assert "ContainerName=api\n" in content
        assert "Environment=DATABASE_URL=postgres://db:5432/app\n" in content
        assert "Network=frontend.network\n" in content
        assert "Network=backend.network\n" in content
        assert "Restart=on-failure\n" in content

    def test_all_optional_fields(self):
        svc = ComposeService.from_dict("app", {
            "image": "app:1",
            "container_name": "my-app",
            "working_dir": "/srv",
            "user": "1000:1000",
            "hostname": "app.local",
            "entrypoint": ["/bin/sh", "-c"],
            "command": ["echo", "hi"],
            "privileged": True,
            "cap_add": ["NET_ADMIN"],
            "cap_drop": ["MKNOD"],
            "labels": {"com.example.team": "core"},
        })
        content = render_container_unit("app", svc)

        for line in [
            "ContainerName=my-app",
            "WorkingDir=/srv",
            "User=1000:1000",
            "HostName=app.local",
            "Entrypoint=/bin/sh -c",
            "Exec=echo hi",
            "SecurityLabelDisable=true",
            "AddCapability=NET_ADMIN",
            "DropCapability=MKNOD",
            "Label=com.example.team=core",
        ]:
            assert f"{line}\n" in content

    def test_volumes(self, compose):
        content = render_container_unit("db", compose.services["db"], declared_volumes=compose.volumes)

        assert "Volume=db-data.volume:/var/lib/postgresql/data\n" in content
        assert "Volume=./init:/docker-entrypoint-initdb.d:ro\n" in content

    def test_undeclared_volume_passes_through(self):
        svc = ComposeService.from_dict("app", {"image": "app", "volumes": ["cache:/cache"]})
        content = render_container_unit("app", svc)
        assert "Volume=cache:/cache\n" in content

    def test_publish_port(self, compose):
        content = render_container_unit("web", compose.services["web"])
        assert "PublishPort=8080:80\n" in content

    def test_start_timeout_from_config(self, compose):
        config = ConverterConfig(start_timeout=120, wanted_by="multi-user.target")
        content = render_container_unit("db", compose.services["db"], config)

        assert "TimeoutStartSec=120\n" in content
        assert "WantedBy=multi-user.target\n" in content


class TestRenderVolumeUnit:
    def test_local_driver_omitted(self):
        content = render_volume_unit("data", ComposeVolume(name="data", driver="local"))
        assert content == (
            "[Unit]\n"
            "Description=data volume\n"
            "\n"
            "[Volume]\n"
            "\n"
            "[Install]\n"
            "WantedBy=default.target\n"
        )

    def test_driver_and_labels(self):
        volume = ComposeVolume(name="data", driver="nfs", labels={"backup": "daily"})
        content = render_volume_unit("data", volume)

        assert "Driver=nfs\n" in content
        assert "Label=backup=daily\n" in content

    def test_external_volume_rendered(self):
        content = render_volume_unit("shared", ComposeVolume(name="shared", external=True))
        assert "Description=shared volume\n" in content


class TestRenderNetworkUnit:
    def test_network(self):
        network = ComposeNetwork(name="backend", driver="bridge", labels={"tier": "data"})
        content = render_network_unit("backend", network)

        assert content.startswith("[Unit]\nDescription=backend network\n")
        assert "[Network]\nDriver=bridge\nLabel=tier=data\n" in content
        assert content.endswith("[Install]\nWantedBy=default.target\n")

    def test_no_driver(self):
        content = render_network_unit("frontend", ComposeNetwork(name="frontend"))
        assert "Driver=" not in content


class TestQuadletGenerator:
    def test_writes_all_files(self, compose, tmp_path):
        out_dir = tmp_path / "quadlet"
        written = QuadletGenerator(compose, out_dir).generate()

        names = sorted(p.name for p in written)
        assert names == [
            "api.container",
            "backend.network",
            "db-data.volume",
            "db.container",
            "frontend.network",
            "web.container",
        ]
        for path in written:
            assert path.exists()

        content = (out_dir / "web.container").read_text()
        assert "After=api.service\n" in content

    def test_write_order(self, compose, tmp_path):
        writer = RecordingWriter()
        written = QuadletGenerator(compose, tmp_path, writer=writer).generate()

        assert [p.name for p in written] == [
            "backend.network",
            "frontend.network",
            "db-data.volume",
            "api.container",
            "db.container",
            "web.container",
        ]

    def test_file_permissions(self, compose, tmp_path):
        written = generate_quadlet_files(compose, tmp_path)

        for path in written:
            mode = stat.S_IMODE(os.stat(path).st_mode)
            assert mode == 0o644

    def test_injected_writer(self, compose, tmp_path):
        writer = RecordingWriter()
        QuadletGenerator(compose, tmp_path / "out", writer=writer).generate()

        assert set(writer.files) == {
            "api.container",
            "backend.network",
            "db-data.volume",
            "db.container",
            "frontend.network",
            "web.container",
        }
        assert (tmp_path / "out").is_dir()
        assert not list((tmp_path / "out").iterdir())

    def test_service_without_image_still_written(self, tmp_path):
        compose = ComposeFile.from_dict({"services": {"builder": {"build": "."}}})
        written = generate_quadlet_files(compose, tmp_path)

        content = written[0].read_text()
        assert "Image=" not in content
        assert "ContainerName=builder\n" in content

    def test_output_directory_error(self, compose, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("not a directory")

        with pytest.raises(OutputDirectoryError) as exc_info:
            QuadletGenerator(compose, blocker / "out").generate()

        assert isinstance(exc_info.value.__cause__, OSError)
        assert isinstance(exc_info.value, OSError)

    def test_write_failure_halts(self, compose, tmp_path):
        calls = []

        def failing_writer(path, content):
            calls.append(path.name)
            if path.name == "db-data.volume":
                raise PermissionError("denied")

        with pytest.raises(UnitFileError) as exc_info:
            QuadletGenerator(compose, tmp_path, writer=failing_writer).generate()

        err = exc_info.value
        assert err.name == "db-data"
        assert err.kind == "volume"
        assert "db-data" in str(err)
        assert isinstance(err.__cause__, PermissionError)
        # No container files after the failure
        assert calls == ["backend.network", "frontend.network", "db-data.volume"]
