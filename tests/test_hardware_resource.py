import pytest

from astrasim.hardware_resource import HardwareResource, NodeType, TraceNode


@pytest.fixture
def resource():
    return HardwareResource(1)


def test_cpu_slot_occupy_and_release(resource):
    node = TraceNode(1, NodeType.COMP_NODE, is_cpu_op=True)
    assert resource.is_available(node) is True
    resource.occupy(node)
    assert resource.is_available(node) is False
    assert resource.num_cpu_ops == 1
    resource.release(node)
    assert resource.is_available(node) is True
    assert resource.num_in_flight_cpu_ops == 0


def test_gpu_compute_records_node(resource):
    node = TraceNode(2, NodeType.COMP_NODE)
    resource.occupy(node)
    assert resource.gpu_ops_node is node
    assert resource.num_gpu_ops == 1
    assert resource.is_available(TraceNode(3, NodeType.COMM_COLL_NODE)) is True


def test_double_occupy_raises(resource):
    resource.occupy(TraceNode(1, NodeType.COMM_COLL_NODE))
    with pytest.raises(RuntimeError):
        resource.occupy(TraceNode(2, NodeType.COMM_SEND_NODE))


def test_release_without_occupy_raises(resource):
    with pytest.raises(RuntimeError):
        resource.release(TraceNode(1, NodeType.COMP_NODE))


def test_recv_nodes_bypass_comm_slot(resource):
    send = TraceNode(1, NodeType.COMM_SEND_NODE)
    recv = TraceNode(2, NodeType.COMM_RECV_NODE)
    resource.occupy(send)
    assert resource.is_available(send) is False
    assert resource.is_available(recv) is True
    resource.occupy(recv)
    assert resource.num_in_flight_gpu_comm_ops == 1
    assert resource.num_gpu_comms == 1
    resource.release(recv)
    assert resource.num_in_flight_gpu_comm_ops == 1
    assert resource.gpu_comms_node is send


def test_report_prints_counters(resource, capsys):
    resource.occupy(TraceNode(1, NodeType.COMP_NODE, is_cpu_op=True))
    resource.tics_gpu_ops = 250
    resource.report()
    lines = capsys.readouterr().out.splitlines()
    assert lines[0] == "num_cpu_ops: 1"
    assert "tics_gpu_ops: 250" in lines
    assert len(lines) == 6