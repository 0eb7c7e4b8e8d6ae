"""Tests for the Fruchterman-Reingold layout driver."""

import numpy as np
import pytest

from spring_embedder import (
    CallbackRenderer,
    EngineClosedError,
    EventType,
    FruchtermanReingoldLayout,
    Graph,
    InvalidEdgeError,
    InvalidIterationsError,
    LayoutState,
    LayoutStateError,
    ParallelForceEngine,
    SequentialForceEngine,
    Vector2D,
    normalize_edge_weights,
    star_of_stars,
)

SIZE = (640.0, 480.0)
ENGINES = ["sequential", "parallel"]


def create_demo_graph():
    """Small star of stars with 13 vertices."""
    return star_of_stars(3, 3)


class RecordingRenderer(CallbackRenderer):
    """Keeps every snapshot and counts finish calls."""

    def __init__(self):
        super().__init__(on_render=self._record, on_finish=self._finished)
        self.frames = []
        self.iterations = []
        self.finish_calls = 0

    def _record(self, graph, iteration, positions):
        self.iterations.append(iteration)
        self.frames.append(positions)

    def _finished(self):
        self.finish_calls += 1


class TestLayoutBasics:
    """Tests for the layout result."""

    @pytest.mark.parametrize("engine", ENGINES)
    def test_all_vertices_inside_area(self, engine):
        """Every vertex gets a position inside [0, w] x [0, h]."""
        graph = create_demo_graph()
        with FruchtermanReingoldLayout(size=SIZE, engine=engine, random_seed=3) as layout:
            positions = layout.layout(graph, iterations=30)
        assert set(positions) == set(graph.vertices)
        for pos in positions.values():
            assert 0.0 <= pos.x <= SIZE[0]
            assert 0.0 <= pos.y <= SIZE[1]

    def test_zero_iterations_returns_initial_placement(self):
        """With no iterations the seeded placement is returned and finish still runs."""
        graph = create_demo_graph()
        renderer = RecordingRenderer()
        layout = FruchtermanReingoldLayout(size=SIZE, renderer=renderer, random_seed=11)
        positions = layout.layout(graph, iterations=0)
        assert positions == layout._initial_positions(graph.vertices)
        assert renderer.frames == []
        assert renderer.finish_calls == 1

    def test_initial_placement_is_half_open(self):
        """Initial positions lie in [0, w) x [0, h)."""
        graph = star_of_stars(5, 10)
        layout = FruchtermanReingoldLayout(size=SIZE, random_seed=0)
        for pos in layout.layout(graph, iterations=0).values():
            assert 0.0 <= pos.x < SIZE[0]
            assert 0.0 <= pos.y < SIZE[1]

    def test_seed_reproducible(self):
        """Same seed, same result."""
        graph = create_demo_graph()
        first = FruchtermanReingoldLayout(size=SIZE, random_seed=42).layout(graph, 20)
        second = FruchtermanReingoldLayout(size=SIZE, random_seed=42).layout(graph, 20)
        assert first == second

    def test_different_seeds_differ(self):
        """Different seeds give different placements."""
        graph = create_demo_graph()
        first = FruchtermanReingoldLayout(size=SIZE, random_seed=1).layout(graph, 0)
        second = FruchtermanReingoldLayout(size=SIZE, random_seed=2).layout(graph, 0)
        assert first != second

    @pytest.mark.parametrize("engine", ENGINES)
    def test_empty_graph(self, engine):
        """Graphs without vertices lay out to an empty map."""
        renderer = RecordingRenderer()
        with FruchtermanReingoldLayout(size=SIZE, engine=engine, renderer=renderer) as layout:
            assert layout.layout(Graph(), iterations=3) == {}
        assert renderer.frames == [{}, {}, {}]

    def test_single_vertex_stays_put(self):
        """A lone vertex feels no force."""
        graph = Graph()
        graph.add_vertex("solo")
        layout = FruchtermanReingoldLayout(size=SIZE, random_seed=5)
        start = layout.layout(graph, 0)
        assert layout.layout(graph, 10) == start

    @pytest.mark.parametrize("engine", ENGINES)
    def test_coincident_pair(self, engine):
        """Two vertices at the same spot do not produce errors or NaN."""
        graph = Graph.from_edges([("a", "b")], weighted=False)
        with FruchtermanReingoldLayout(size=SIZE, engine=engine) as layout:
            layout._initial_positions = lambda vertices: {
                v: Vector2D(100.0, 100.0) for v in vertices
            }
            positions = layout.layout(graph, iterations=5)
        for pos in positions.values():
            assert np.isfinite(pos.x) and np.isfinite(pos.y)

    def test_self_loops_and_parallel_edges(self):
        """Pseudographs lay out without errors."""
        graph = Graph.from_edges([("a", "a", 2.0), ("a", "b", 1.0), ("a", "b", 7.0)])
        positions = FruchtermanReingoldLayout(size=SIZE, random_seed=9).layout(graph, 10)
        assert set(positions) == {"a", "b"}

    def test_connected_vertices_approach(self):
        """A heavily weighted edge pulls far-apart endpoints together."""
        graph = Graph.from_edges([("a", "b", 1.0)], weighted=False)
        layout = FruchtermanReingoldLayout(size=SIZE)
        layout._initial_positions = lambda vertices: {
            "a": Vector2D(10.0, 10.0),
            "b": Vector2D(630.0, 470.0),
        }
        positions = layout.layout(graph, iterations=20)
        start = Vector2D(10.0, 10.0).subtract(Vector2D(630.0, 470.0)).length()
        assert positions["a"].subtract(positions["b"]).length() < start


class TestInputValidation:
    """Tests for argument errors."""

    def test_negative_iterations(self):
        """Negative iteration counts raise before anything runs."""
        layout = FruchtermanReingoldLayout(size=SIZE)
        with pytest.raises(InvalidIterationsError):
            layout.layout(create_demo_graph(), -1)
        assert layout.state == LayoutState.initialized

    def test_dangling_edge(self):
        """Edges to unknown vertices raise."""

        class DanglingGraph:
            vertices = ["a"]
            edges = [("a", "ghost")]
            is_weighted = False

            def edge_source(self, edge):
                return edge[0]

            def edge_target(self, edge):
                return edge[1]

            def edge_weight(self, edge):
                return 1.0

        with pytest.raises(InvalidEdgeError):
            FruchtermanReingoldLayout(size=SIZE).layout(DanglingGraph(), 5)

    def test_unknown_engine_name(self):
        """Unknown engine names raise."""
        with pytest.raises(ValueError, match="Unknown force engine"):
            FruchtermanReingoldLayout(size=SIZE, engine="quantum")


class TestTemperature:
    """Tests for the cooling schedule."""

    def test_schedule(self):
        """Temperature cools by 0.95 per iteration down to 1.5."""
        layout = FruchtermanReingoldLayout(size=SIZE)
        assert layout.temperature_after(0) == 50.0
        assert layout.temperature_after(1) == pytest.approx(47.5)
        assert layout.temperature_after(2) == pytest.approx(45.125)
        assert layout.temperature_after(500) == 1.5

    def test_schedule_is_non_increasing(self):
        """Temperatures never increase and never drop below the floor."""
        layout = FruchtermanReingoldLayout(size=SIZE)
        temps = [layout.temperature_after(i) for i in range(120)]
        assert all(a >= b for a, b in zip(temps, temps[1:]))
        assert min(temps) == 1.5

    def test_tick_events_carry_temperature(self):
        """Tick events report the temperature used by that iteration."""
        events = []
        layout = FruchtermanReingoldLayout(size=SIZE, on_tick=events.append, random_seed=1)
        layout.layout(create_demo_graph(), 4)
        assert [e["iteration"] for e in events] == [0, 1, 2, 3]
        for e in events:
            assert e["temperature"] == pytest.approx(layout.temperature_after(e["iteration"]))

    @pytest.mark.parametrize("engine", ENGINES)
    def test_movement_bounded_by_temperature(self, engine):
        """No vertex moves further than the temperature in one iteration."""
        graph = star_of_stars(4, 5)
        renderer = RecordingRenderer()
        with FruchtermanReingoldLayout(
            size=SIZE,
            engine=engine,
            renderer=renderer,
            random_seed=7,
            engine_options={"dtype": np.float64} if engine == "parallel" else None,
        ) as layout:
            layout.layout(graph, iterations=25)
            previous = layout._initial_positions(graph.vertices)

        for i, frame in enumerate(renderer.frames):
            limit = layout.temperature_after(i) + 1e-6
            for v, pos in frame.items():
                assert pos.subtract(previous[v]).length() <= limit
            previous = frame


class TestRendererHooks:
    """Tests for renderer calls and failure handling."""

    def test_state_per_run(self):
        """Each call runs initialized or finished -> running -> finished."""
        seen = []
        layout = FruchtermanReingoldLayout(size=SIZE, random_seed=3)
        layout.renderer = CallbackRenderer(on_render=lambda g, i, pos: seen.append(layout.state))
        assert layout.state == LayoutState.initialized
        layout.layout(create_demo_graph(), 2)
        assert layout.state == LayoutState.finished
        layout.layout(create_demo_graph(), 2)
        assert layout.state == LayoutState.finished
        assert seen == [LayoutState.running] * 4

    def test_render_called_once_per_iteration(self):
        """render gets iterations 0..n-1 and finish runs once."""
        renderer = RecordingRenderer()
        layout = FruchtermanReingoldLayout(size=SIZE, renderer=renderer, random_seed=2)
        result = layout.layout(create_demo_graph(), 6)
        assert renderer.iterations == [0, 1, 2, 3, 4, 5]
        assert renderer.finish_calls == 1
        assert renderer.frames[-1] == result

    def test_snapshots_are_independent(self):
        """Renderers receive maps they may keep."""
        renderer = RecordingRenderer()
        FruchtermanReingoldLayout(size=SIZE, renderer=renderer, random_seed=2).layout(
            create_demo_graph(), 3
        )
        assert renderer.frames[0] is not renderer.frames[1]
        assert renderer.frames[0] != renderer.frames[2]

    def test_renderer_error_propagates_and_releases_session(self):
        """A failing renderer aborts the run; the engine can be used again."""

        def explode(graph, iteration, positions):
            if iteration == 2:
                raise RuntimeError("disk full")

        with ParallelForceEngine(workers=1) as engine:
            layout = FruchtermanReingoldLayout(
                size=SIZE, engine=engine, renderer=CallbackRenderer(on_render=explode)
            )
            with pytest.raises(RuntimeError, match="disk full"):
                layout.layout(create_demo_graph(), 5)
            assert layout.state == LayoutState.finished
            assert not engine.device.buffers.in_use

            layout.renderer = None
            assert len(layout.layout(create_demo_graph(), 2)) == 13

    def test_reentrant_layout_rejected(self):
        """Calling layout() from a renderer raises LayoutStateError."""
        graph = create_demo_graph()
        layout = FruchtermanReingoldLayout(size=SIZE)

        def reenter(g, iteration, positions):
            layout.layout(graph, 1)

        layout.renderer = CallbackRenderer(on_render=reenter)
        with pytest.raises(LayoutStateError):
            layout.layout(graph, 3)
        assert layout.state == LayoutState.finished

    def test_renderer_swap_blocked_while_running(self):
        """The renderer cannot be replaced mid-run."""
        layout = FruchtermanReingoldLayout(size=SIZE)

        def swap(g, iteration, positions):
            layout.renderer = None

        layout.renderer = CallbackRenderer(on_render=swap)
        with pytest.raises(LayoutStateError):
            layout.layout(create_demo_graph(), 2)


class TestEvents:
    """Tests for start/tick/end events."""

    def test_event_order(self):
        """start, one tick per iteration, then end."""
        seen = []
        layout = FruchtermanReingoldLayout(
            size=SIZE,
            on_start=lambda e: seen.append(e["type"]),
            on_tick=lambda e: seen.append(e["type"]),
            on_end=lambda e: seen.append(e["type"]),
        )
        layout.layout(create_demo_graph(), 3)
        assert seen == [EventType.start] + [EventType.tick] * 3 + [EventType.end]

    def test_on_chaining(self):
        """on() accepts names and returns the layout."""
        ends = []
        layout = FruchtermanReingoldLayout(size=SIZE)
        assert layout.on("end", ends.append) is layout
        layout.layout(create_demo_graph(), 2)
        assert ends[0]["iteration"] == 2


class TestEngineOwnership:
    """Tests for engine lifetime."""

    def test_close_releases_named_engine_without_with(self):
        """close() stops the worker threads of an engine created from a name."""
        layout = FruchtermanReingoldLayout(size=SIZE, engine="parallel")
        try:
            layout.layout(create_demo_graph(), 2)
            assert not layout.engine.device.released
        finally:
            layout.close()
        assert layout.engine.closed
        assert layout.engine.device.released

    def test_named_engine_is_owned(self):
        """An engine created from a name is closed with the layout."""
        with FruchtermanReingoldLayout(size=SIZE, engine="parallel") as layout:
            engine = layout.engine
            assert isinstance(engine, ParallelForceEngine)
        assert engine.closed

    def test_passed_engine_is_not_closed(self):
        """An engine passed in stays open after the layout closes."""
        engine = SequentialForceEngine()
        with FruchtermanReingoldLayout(size=SIZE, engine=engine):
            pass
        assert not engine.closed

    def test_engine_reused_across_calls(self):
        """One engine serves several layout calls."""
        with ParallelForceEngine(workers=2) as engine:
            layout = FruchtermanReingoldLayout(size=SIZE, engine=engine, random_seed=4)
            first = layout.layout(create_demo_graph(), 5)
            second = layout.layout(star_of_stars(2, 8), 5)
        assert len(first) == 13
        assert len(second) == 19


class TestEngineEquivalence:
    """Tests comparing the sequential and parallel engines."""

    def run(self, engine, iterations):
        layout = FruchtermanReingoldLayout(size=SIZE, engine=engine, random_seed=21)
        return layout.layout(create_demo_graph(), iterations)

    def test_float64_matches(self):
        """Double precision buffers track the sequential engine closely."""
        expected = self.run(SequentialForceEngine(), 10)
        with ParallelForceEngine(dtype=np.float64, workers=3, work_group_size=4) as engine:
            result = self.run(engine, 10)
        for v in expected:
            assert result[v].is_close(expected[v], 1e-6)

    def test_float32_close(self):
        """Single precision buffers stay within rounding of the sequential engine."""
        expected = self.run(SequentialForceEngine(), 5)
        with ParallelForceEngine(dtype=np.float32) as engine:
            result = self.run(engine, 5)
        for v in expected:
            assert result[v].is_close(expected[v], 0.05)


class TestSessionLifecycle:
    """Tests for the session contract shared by both engines."""

    @pytest.mark.parametrize(
        "engine_factory",
        [SequentialForceEngine, lambda: ParallelForceEngine(workers=1)],
        ids=["sequential", "parallel"],
    )
    def test_closed_session_rejects_work(self, engine_factory):
        """step() and positions() raise EngineClosedError after close()."""
        graph = create_demo_graph()
        positions = {v: Vector2D(float(i), float(i)) for i, v in enumerate(graph.vertices)}
        with engine_factory() as engine:
            session = engine.open_session(
                graph, positions, normalize_edge_weights(graph), SIZE
            )
            session.step(10.0)
            session.close()
            session.close()
            assert session.closed
            with pytest.raises(EngineClosedError):
                session.step(10.0)
            with pytest.raises(EngineClosedError):
                session.positions()
