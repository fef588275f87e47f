import pytest

from pcap_builders import handshake_frames, write_pcap


@pytest.fixture
def handshake_pcap(tmp_path):
    p = tmp_path / "handshake.pcap"
    write_pcap(str(p), handshake_frames())
    return p
