"""Tests for the stage registry."""

import pytest

from paintbynumbers.engine.context import PipelineContext
from paintbynumbers.engine.registry import Phase, StageRegistry, StageSpec


def _noop(ctx: PipelineContext) -> None:
    pass


def test_register_and_list():
    reg = StageRegistry()
    late = StageSpec(id="S4.01", phase=Phase.RENDERING, fn=_noop)
    early = StageSpec(id="S0.01", phase=Phase.VALIDATION, fn=_noop)
    reg.register(late)
    reg.register(early)
    assert reg.all() == [early, late]
    assert reg.count == 2


def test_duplicate_id_rejected():
    reg = StageRegistry()
    reg.register(StageSpec(id="S0.01", phase=Phase.VALIDATION, fn=_noop))
    with pytest.raises(ValueError, match="Duplicate"):
        reg.register(StageSpec(id="S0.01", phase=Phase.VALIDATION, fn=_noop))


def test_get_phase():
    reg = StageRegistry()
    reg.register(StageSpec(id="S0.01", phase=Phase.VALIDATION, fn=_noop))
    reg.register(StageSpec(id="S1.01", phase=Phase.PALETTE, fn=_noop))
    palette = reg.get_phase(Phase.PALETTE)
    assert len(palette) == 1
    assert palette[0].id == "S1.01"


def test_with_tag():
    reg = StageRegistry()
    reg.register(StageSpec(id="S3.01", phase=Phase.SMOOTHING, fn=_noop, tags={"smoothing"}))
    reg.register(StageSpec(id="S4.01", phase=Phase.RENDERING, fn=_noop))
    assert reg.with_tag("smoothing") == {"S3.01"}


def test_resolve_order_with_deps():
    reg = StageRegistry()
    reg.register(StageSpec(id="S2.01", phase=Phase.SEGMENTATION, fn=_noop, dependencies=["S1.03"]))
    reg.register(StageSpec(id="S1.03", phase=Phase.PALETTE, fn=_noop))
    reg.register(StageSpec(id="S4.01", phase=Phase.RENDERING, fn=_noop))
    order = reg.resolve_order({"S2.01"})
    assert [s.id for s in order] == ["S1.03", "S2.01"]


def test_resolve_order_all():
    reg = StageRegistry()
    for i in range(5):
        reg.register(StageSpec(id=f"S1.0{i + 1}", phase=Phase.PALETTE, fn=_noop))
    assert len(reg.resolve_order(None)) == 5


def test_circular_dependency_detected():
    reg = StageRegistry()
    reg.register(StageSpec(id="S1.01", phase=Phase.PALETTE, fn=_noop, dependencies=["S1.02"]))
    reg.register(StageSpec(id="S1.02", phase=Phase.PALETTE, fn=_noop, dependencies=["S1.01"]))
    with pytest.raises(ValueError, match="Circular"):
        reg.resolve_order()
