"""Tests for the command line tool."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import pytest

from onvif_provisioning.cli import build_parser, main
from onvif_provisioning.exceptions import (
    DiscoveryTransportError,
    TransportError,
    UntrustedServiceOrigin,
)
from onvif_provisioning.schemas.device import AdvertisedService, Credentials
from onvif_provisioning.services.onvif.capabilities import CapabilitySet
from onvif_provisioning.services.onvif.registry import CapabilitySlot

DISCOVER = "onvif_provisioning.cli.discover"


@pytest.fixture
def capabilities(mock_client_for) -> CapabilitySet:
    """Device advertising media and PTZ only."""
    return CapabilitySet(
        devicemgmt=mock_client_for(
            CapabilitySlot.DEVICEMGMT, "http://cam.local/onvif/device_service"
        ),
        provisioning=mock_client_for(
            CapabilitySlot.PROVISIONING, "http://cam.local/onvif/device_service"
        ),
        optional={
            CapabilitySlot.MEDIA: mock_client_for(CapabilitySlot.MEDIA),
            CapabilitySlot.PTZ: mock_client_for(CapabilitySlot.PTZ),
        },
    )


class TestParser:
    """Tests for argument parsing."""

    def test_command_required(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--uri", "http://cam.local/"])

    def test_global_options(self) -> None:
        args = build_parser().parse_args(
            ["--uri", "http://cam.local/", "--timeout", "3", "pan-move", "--direction", "right"]
        )
        assert args.uri == "http://cam.local/"
        assert args.timeout == 3.0
        assert args.command == "pan-move"
        assert args.direction == "right"


class TestInputErrors:
    """Input errors exit with status 2 before any network activity."""

    def test_missing_uri(self, capsys: pytest.CaptureFixture) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["capabilities"])
        assert exc_info.value.code == 2
        assert "--uri must be specified" in capsys.readouterr().err

    @pytest.mark.parametrize(
        "credentials", [["--username", "admin"], ["--password", "secret"]]
    )
    def test_incomplete_credentials(self, credentials: list[str], capsys) -> None:
        with patch(DISCOVER, new_callable=AsyncMock) as discover:
            with pytest.raises(SystemExit) as exc_info:
                main(["--uri", "http://cam.local/", *credentials, "capabilities"])

        assert exc_info.value.code == 2
        assert "username and password must be specified together" in capsys.readouterr().err
        discover.assert_not_awaited()

    def test_invalid_uri(self) -> None:
        with patch(DISCOVER, new_callable=AsyncMock) as discover:
            with pytest.raises(SystemExit) as exc_info:
                main(["--uri", "not a uri", "capabilities"])
        assert exc_info.value.code == 2
        discover.assert_not_awaited()


class TestDiscoveryFailures:
    """Discovery errors exit with status 1."""

    @pytest.mark.parametrize(
        "error",
        [
            UntrustedServiceOrigin("http://evil.example/svc", "http://cam.local/"),
            DiscoveryTransportError("GetServices failed"),
        ],
    )
    def test_discovery_error(self, error, capsys) -> None:
        with patch(DISCOVER, new=AsyncMock(side_effect=error)):
            assert main(["--uri", "http://cam.local/", "capabilities"]) == 1
        assert capsys.readouterr().out == ""


class TestCommands:
    """Command output against a stubbed capability set."""

    def test_discover_arguments(self, capabilities: CapabilitySet) -> None:
        with patch(DISCOVER, new=AsyncMock(return_value=capabilities)) as discover:
            main(
                [
                    "--uri", "http://cam.local/",
                    "--username", "admin",
                    "--password", "secret",
                    "--timeout", "4",
                    "capabilities",
                ]
            )

        args, kwargs = discover.await_args
        assert str(args[0]) == "http://cam.local/"
        assert args[1] == Credentials(username="admin", password="secret")
        assert kwargs["timeout"] == 4.0

    def test_settings_fill_missing_flags(
        self, capabilities: CapabilitySet, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("ONVIF_URI", "http://10.0.0.5/")
        with patch(DISCOVER, new=AsyncMock(return_value=capabilities)) as discover:
            assert main(["capabilities"]) == 0

        args, kwargs = discover.await_args
        assert str(args[0]) == "http://10.0.0.5/"
        assert args[1] is None
        assert kwargs["timeout"] == 30.0

    def test_capabilities(self, capabilities: CapabilitySet, capsys) -> None:
        with patch(DISCOVER, new=AsyncMock(return_value=capabilities)):
            assert main(["--uri", "http://cam.local/", "capabilities"]) == 0

        out = capsys.readouterr().out.splitlines()
        assert "devicemgmt: http://cam.local/onvif/device_service" in out
        assert "ptz: http://cam.local/onvif/ptz_service" in out
        assert "imaging: not advertised" in out

    def test_clients_closed_after_command(self, capabilities: CapabilitySet) -> None:
        with patch(DISCOVER, new=AsyncMock(return_value=capabilities)):
            main(["--uri", "http://cam.local/", "capabilities"])
        for _, client in capabilities.items():
            client.close.assert_awaited_once()

    def test_get_service_capabilities(self, capabilities: CapabilitySet, capsys) -> None:
        media = capabilities.get(CapabilitySlot.MEDIA)
        media.call = AsyncMock(
            side_effect=TransportError("GetServiceCapabilities", media.address, "refused")
        )
        ptz = capabilities.get(CapabilitySlot.PTZ)
        ptz.call = AsyncMock(return_value={"MoveStatus": True})

        with patch(DISCOVER, new=AsyncMock(return_value=capabilities)):
            assert main(["--uri", "http://cam.local/", "get-service-capabilities"]) == 0

        out = capsys.readouterr().out
        assert "Failed to fetch media: GetServiceCapabilities failed" in out
        assert 'ptz: {\n  "MoveStatus": true\n}' in out
        assert "analytics: not advertised" in out

    def test_get_service_capabilities_order(
        self, capabilities: CapabilitySet, capsys
    ) -> None:
        """Provisioning is reported first, then the device services."""
        with patch(DISCOVER, new=AsyncMock(return_value=capabilities)):
            assert main(["--uri", "http://cam.local/", "get-service-capabilities"]) == 0

        lines = capsys.readouterr().out.splitlines()
        reported = [line.split(":", 1)[0] for line in lines if not line.startswith(" ")]
        assert reported == [
            "provisioning",
            "devicemgmt",
            "events",
            "deviceio",
            "media",
            "media2",
            "imaging",
            "ptz",
            "analytics",
        ]

    def test_get_system_date_and_time(self, capabilities: CapabilitySet, capsys) -> None:
        capabilities.devicemgmt.call = AsyncMock(return_value={"DateTimeType": "NTP"})
        with patch(DISCOVER, new=AsyncMock(return_value=capabilities)):
            assert main(["--uri", "http://cam.local/", "get-system-date-and-time"]) == 0

        capabilities.devicemgmt.call.assert_awaited_once_with("GetSystemDateAndTime")
        assert '"DateTimeType": "NTP"' in capsys.readouterr().out

    def test_failed_command_exits_1(self, capabilities: CapabilitySet, capsys) -> None:
        devicemgmt = capabilities.devicemgmt
        devicemgmt.call = AsyncMock(
            side_effect=TransportError("GetSystemDateAndTime", devicemgmt.address, "timeout")
        )
        with patch(DISCOVER, new=AsyncMock(return_value=capabilities)):
            assert main(["--uri", "http://cam.local/", "get-system-date-and-time"]) == 1
        assert "Failed to fetch system date and time" in capsys.readouterr().out

    def test_pan_move_without_sources(self, capabilities: CapabilitySet, capsys) -> None:
        capabilities.provisioning.call = AsyncMock(return_value=SimpleNamespace(Source=[]))
        with patch(DISCOVER, new=AsyncMock(return_value=capabilities)):
            assert main(["--uri", "http://cam.local/", "pan-move"]) == 1
        assert "No service capabilities" in capsys.readouterr().out

    def test_get_services(self, capabilities: CapabilitySet, capsys) -> None:
        capabilities.devicemgmt.list_services = AsyncMock(
            return_value=[
                AdvertisedService(
                    namespace="http://www.onvif.org/ver20/ptz/wsdl",
                    xaddr="http://cam.local/onvif/ptz_service",
                    version="2.60",
                )
            ]
        )
        with patch(DISCOVER, new=AsyncMock(return_value=capabilities)):
            assert main(["--uri", "http://cam.local/", "get-services"]) == 0

        assert (
            "http://www.onvif.org/ver20/ptz/wsdl (v2.60): http://cam.local/onvif/ptz_service"
            in capsys.readouterr().out
        )
