"""Minimal APRS-IS client for reading the OGN traffic feed."""

from __future__ import annotations

import io
import logging
import random
import socket
from dataclasses import dataclass
from typing import Iterator, Optional

from .encoder import format_filter_command, format_login_string

from .. import __version__

DEFAULT_SERVER = "aprs.glidernet.org"
DEFAULT_PORT = 14580
_LOGRESP_ATTEMPTS = 5
_LOGIN_REFUSED = frozenset({"invalid", "reject", "rejected", "bad"})
_ENCODING = "latin-1"


class APRSISClientError(RuntimeError):
    pass


@dataclass(slots=True)
class APRSISConfig:
    callsign: str
    latitude: float
    longitude: float
    radius_km: int = 50
    host: str = DEFAULT_SERVER
    port: int = DEFAULT_PORT
    software_name: str = "ogn-aprs"
    software_version: str = __version__
    timeout: float = 60.0


logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())


def random_callsign() -> str:
    """Return a throwaway read-only login such as ``DMP482913``."""
    return f"DMP{random.randint(100000, 999999)}"


class APRSISClient:
    def __init__(self, config: APRSISConfig) -> None:
        self._config = config
        self._socket: Optional[socket.socket] = None
        self._reader: Optional[io.BufferedReader] = None
        self._writer: Optional[io.BufferedWriter] = None
        self.login_verified = False

    @property
    def config(self) -> APRSISConfig:
        return self._config

    @property
    def connected(self) -> bool:
        return self._socket is not None

    def connect(self) -> None:
        if self._socket is not None:
            return
        address = (self._config.host, self._config.port)
        logger.debug("Connecting to APRS-IS %s:%s with filter r=%skm", *address, self._config.radius_km)
        try:
            sock = socket.create_connection(address, timeout=self._config.timeout)
        except OSError as exc:
            raise APRSISClientError(f"Unable to connect to APRS-IS server {address[0]}:{address[1]}: {exc}") from exc
        sock.settimeout(self._config.timeout)
        self._socket = sock
        self._reader = sock.makefile("rb")
        self._writer = sock.makefile("wb")
        try:
            self._write(self._build_login_line())
            self.login_verified = self._await_logresp()
            logger.info(
                "Connected to APRS-IS %s:%s as %s (%s)",
                self._config.host,
                self._config.port,
                self._config.callsign,
                "verified" if self.login_verified else "read-only",
            )
        except Exception:
            self.close()
            raise

    def read_line(self) -> str:
        """Return the next line from the server without its line ending.

        The OGN servers send a keep-alive comment every 20 seconds or so,
        so a socket timeout means the session is dead.
        """
        reader = self._require_reader()
        try:
            raw = reader.readline()
        except TimeoutError as exc:
            raise APRSISClientError(f"No data from APRS-IS for {self._config.timeout:g}s") from exc
        except OSError as exc:
            raise APRSISClientError(f"Error reading from APRS-IS: {exc}") from exc
        if not raw:
            raise APRSISClientError("APRS-IS server closed the connection")
        return raw.decode(_ENCODING).rstrip("\r\n")

    def lines(self) -> Iterator[str]:
        """Yield lines until the session fails; the failure is raised."""
        while True:
            yield self.read_line()

    def update_filter(self, latitude: float, longitude: float, radius_km: int) -> None:
        """Replace the server-side range filter of the running session."""
        self._write(format_filter_command(latitude, longitude, radius_km))
        self._config.latitude = latitude
        self._config.longitude = longitude
        self._config.radius_km = radius_km
        logger.debug("APRS-IS filter updated to %.4f,%.4f r=%skm", latitude, longitude, radius_km)

    def send_packet(self, packet: str | bytes) -> None:
        packet_text = packet.decode(_ENCODING) if isinstance(packet, bytes) else packet
        self._write(packet_text.rstrip("\r\n") + "\n")

    def close(self) -> None:
        """Release the session; safe to call more than once."""
        resources = (self._writer, self._reader, self._socket)
        self._writer = self._reader = self._socket = None
        if all(resource is None for resource in resources):
            return
        for resource in resources:
            if resource is None:
                continue
            try:
                resource.close()
            except OSError as exc:
                logger.debug("Ignoring error while closing APRS-IS session: %s", exc)
        logger.info("Disconnected from APRS-IS %s:%s", self._config.host, self._config.port)

    def __enter__(self) -> "APRSISClient":
        self.connect()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _await_logresp(self) -> bool:
        """Skip server banners until ``# logresp``; return whether it says verified."""
        reader = self._require_reader()
        for _ in range(_LOGRESP_ATTEMPTS):
            try:
                raw = reader.readline()
            except OSError as exc:
                raise APRSISClientError(f"Error reading APRS-IS login reply: {exc}") from exc
            if not raw:
                raise APRSISClientError("APRS-IS server hung up before answering the login")
            reply = raw.decode(_ENCODING).strip()
            words = reply.lower().split()
            if words[:2] != ["#", "logresp"]:
                logger.debug("APRS-IS: %s", reply)
                continue
            if any(word.strip(",") in _LOGIN_REFUSED for word in words[2:]):
                raise APRSISClientError(f"APRS-IS login failed: {reply}")
            return "verified" in (word.strip(",") for word in words[2:])
        raise APRSISClientError(f"APRS-IS login reply not received within {_LOGRESP_ATTEMPTS} lines")

    def _build_login_line(self) -> str:
        return format_login_string(
            self._config.callsign,
            self._config.latitude,
            self._config.longitude,
            self._config.radius_km,
            self._config.software_name,
            self._config.software_version,
        )

    def _write(self, text: str) -> None:
        writer = self._require_writer()
        try:
            writer.write(text.encode(_ENCODING, errors="replace"))
            writer.flush()
        except OSError as exc:
            raise APRSISClientError(f"Failed to send to APRS-IS: {exc}") from exc

    def _require_reader(self) -> io.BufferedReader:
        if self._reader is None:
            raise APRSISClientError("APRS-IS connection not established")
        return self._reader

    def _require_writer(self) -> io.BufferedWriter:
        if self._writer is None:
            raise APRSISClientError("APRS-IS connection not established")
        return self._writer
