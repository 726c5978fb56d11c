import threading

from xbee_io.adapters.sim import SimAdapter
from xbee_io import metrics


def setup_function():
    metrics.reset_all()


def test_sim_feed_and_read(scenario_stream):
    a = SimAdapter()
    a.open()
    a.feed(scenario_stream)
    c = a.read(timeout=1.0)
    assert c is not None
    assert c.data == scenario_stream
    assert c.timestamp is not None
    assert a.read() is None
    a.close()
    assert metrics.get("sim_feed") == 1
    assert metrics.get("sim_read") == 1


def test_sim_feed_in_chunks(scenario_stream):
    a = SimAdapter()
    a.open()
    a.feed(scenario_stream, chunk_size=4)
    pieces = []
    while True:
        c = a.read()
        if c is None:
            break
        pieces.append(c.data)
    assert [len(p) for p in pieces] == [4, 4, 4, 2]
    assert b"".join(pieces) == scenario_stream
    a.close()


def test_sim_iter_chunks_stops_on_close():
    a = SimAdapter()
    a.open()
    for i in range(3):
        a.feed(bytes([i]))
    seen = []
    for c in a.iter_chunks():
        seen.append(c.data)
        if len(seen) >= 3:
            break
    assert seen == [b"\x00", b"\x01", b"\x02"]

    done = threading.Event()

    def consume():
        for _ in a.iter_chunks():
            pass
        done.set()

    t = threading.Thread(target=consume, daemon=True)
    t.start()
    a.close()
    assert done.wait(timeout=2.0)
    assert not a.is_open
