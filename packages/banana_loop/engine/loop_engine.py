"""
Banana Loop Engine

Orchestrates:
- Look-ahead scheduler (drum grid, chop sequencer, layer and pad replay)
- Layer and pad recording
- Live performance input (held synth note, pad triggers)
- Sample loading/chopping and WAV export

All state is touched from the event loop task only; sample decoding and
export rendering run in worker threads on immutable inputs or snapshots.

Dependencies are injected via constructor for testability.
Use create_loop_engine() factory for production instances.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from pydantic import ValidationError

from banana_core.errors import DecodeFailed, DeviceUnavailable, NoActiveSample
from banana_core.models import (
    DrumKit,
    EventKind,
    LayerEvent,
    LoopSession,
    PadHit,
    Sample,
    Waveform,
    percent_to_gain,
)
from banana_core.protocols import AudioGraph, BeatListener, TimerQueue

from ..audio.sinks import AudioTriggerSink
from ..audio.voices import ToneVoice
from ..commands import (
    BpmCommand,
    GridCellCommand,
    LayerCommand,
    MuteCommand,
    NoteCommand,
    PadCommand,
    PadSettingsCommand,
    PlayCommand,
    RecordCommand,
    RowVolumeCommand,
    SequencerStepCommand,
    StopCommand,
    SynthCommand,
)
from ..render import OfflineRenderer, RenderResult
from ..result import CommandResult
from ..sampler import SampleChopper, decode_sample, display_name
from .recording import Recorder
from .scheduler import LoopScheduler

logger = logging.getLogger(__name__)


class LoopEngine:
    """
    Main loop engine.

    Command handlers (``_handle_*``) take payload dicts, validate them with
    pydantic command models and return CommandResult instead of raising.
    The public methods are thin wrappers around them.
    """

    def __init__(
        self,
        graph: AudioGraph,
        timers: TimerQueue,
        listener: BeatListener | None = None,
        drum_kit: DrumKit | None = None,
        lookahead: float = 0.1,
        tick_interval: float = 0.025,
    ):
        """
        Initialize LoopEngine with injected dependencies.

        Args:
            graph: Audio graph (SoundDeviceGraph or mock); also the audio clock
            timers: Delayed-callback queue for visual notifications
            listener: UI collaborator receiving beat/pad notifications
            drum_kit: Percussion samples per grid row
            lookahead: Scheduling horizon in seconds
            tick_interval: Scheduler wake-up period in seconds
        """
        self.session = LoopSession(
            drum_kit=drum_kit if drum_kit is not None else DrumKit(sample_rate=graph.sample_rate)
        )
        self.recorder = Recorder()

        self._graph = graph
        self._timers = timers
        self._listener = listener
        self._sink = AudioTriggerSink(self.session, graph)
        self.scheduler = LoopScheduler(
            self.session,
            self._sink,
            clock=graph,
            timers=timers,
            recorder=self.recorder,
            listener=listener,
            lookahead=lookahead,
        )
        self._chopper = SampleChopper()
        self._renderer = OfflineRenderer(graph.sample_rate)

        self._tick_interval = tick_interval
        self._running = False
        self._output_open = False
        self._held_note: ToneVoice | None = None

    # ================================================================
    # Lifecycle
    # ================================================================

    @property
    def playing(self) -> bool:
        return self.scheduler.playing

    @property
    def graph(self) -> AudioGraph:
        return self._graph

    def start(self) -> None:
        """Start the loop engine (the output device opens on first use)"""
        logger.info(
            f"Loop engine started ({self._graph.sample_rate} Hz, "
            f"lookahead {self.scheduler.lookahead * 1000:.0f}ms, "
            f"tick {self._tick_interval * 1000:.0f}ms)"
        )

    def stop(self) -> None:
        """Stop the loop engine"""
        self._running = False
        if self.playing:
            self._handle_stop({})
        self._held_note = None
        if self._output_open:
            self._graph.close()
            self._output_open = False
        logger.info("Loop engine stopped")

    def _ensure_output(self) -> CommandResult | None:
        """Open the audio output if needed; returns an error result on failure."""
        if self._output_open:
            return None
        try:
            self._graph.open()
        except DeviceUnavailable as e:
            logger.error(f"Audio output unavailable: {e}")
            return CommandResult.device_unavailable(str(e))
        self._output_open = True
        return None

    @property
    def _now(self) -> float:
        return self._graph.current_time

    # ================================================================
    # Transport
    # ================================================================

    def _handle_play(self, payload: dict[str, Any]) -> CommandResult:
        """Start playback; an armed layer starts recording instead"""
        try:
            PlayCommand(**payload)
        except ValidationError as e:
            return CommandResult.error(f"Invalid play command: {e}")

        if self.recorder.is_armed:
            return self._trigger_armed_recording()
        return self._start_playback()

    def _start_playback(self) -> CommandResult:
        if self.playing:
            return CommandResult.ok("Already playing")
        failure = self._ensure_output()
        if failure is not None:
            return failure
        self.scheduler.start()
        logger.info(f"Playback started at {self.session.settings.bpm:g} BPM")
        return CommandResult.ok()

    def _handle_stop(self, payload: dict[str, Any]) -> CommandResult:
        """Stop playback, cancel scheduled audio and finalize any take"""
        try:
            StopCommand(**payload)
        except ValidationError as e:
            return CommandResult.error(f"Invalid stop command: {e}")

        if not self.playing:
            self.recorder.disarm()
            return CommandResult.ok("Already stopped")

        self.scheduler.stop()
        # Cancelling the graph silenced the held note as well
        self._held_note = None
        self.recorder.disarm()
        logger.info("Playback stopped")
        return CommandResult.ok()

    def _handle_bpm(self, payload: dict[str, Any]) -> CommandResult:
        """
        Change BPM.

        The scheduler reads the BPM once per tick, so beats already
        committed keep their times.
        """
        try:
            cmd = BpmCommand(**payload)
        except ValidationError as e:
            return CommandResult.error(f"Invalid bpm command: {e}")

        old_bpm = self.session.settings.bpm
        self.session.settings.bpm = cmd.bpm
        logger.debug(f"BPM changed {old_bpm:g} → {cmd.bpm:g}")
        return CommandResult.ok()

    # ================================================================
    # Drum grid and mix
    # ================================================================

    def _handle_grid_cell(self, payload: dict[str, Any]) -> CommandResult:
        try:
            cmd = GridCellCommand(**payload)
        except ValidationError as e:
            return CommandResult.error(f"Invalid grid command: {e}")

        grid = self.session.grid
        if cmd.active is None:
            active = grid.toggle(cmd.row, cmd.column)
        else:
            grid.set(cmd.row, cmd.column, cmd.active)
            active = cmd.active
        return CommandResult.ok(data={"row": cmd.row, "column": cmd.column, "active": active})

    def _handle_row_volume(self, payload: dict[str, Any]) -> CommandResult:
        try:
            cmd = RowVolumeCommand(**payload)
        except ValidationError as e:
            return CommandResult.error(f"Invalid volume command: {e}")

        self.session.settings.row_volumes[cmd.row] = percent_to_gain(cmd.volume)
        return CommandResult.ok()

    def _handle_synth(self, payload: dict[str, Any]) -> CommandResult:
        """Synth volume and waveform; the waveform is latched at record start"""
        try:
            cmd = SynthCommand(**payload)
        except ValidationError as e:
            return CommandResult.error(f"Invalid synth command: {e}")

        settings = self.session.settings
        if cmd.volume is not None:
            settings.synth_volume = percent_to_gain(cmd.volume)
            if self._held_note is not None:
                self._held_note.gain = settings.synth_volume
        if cmd.waveform is not None:
            settings.synth_waveform = Waveform(cmd.waveform)
        return CommandResult.ok(data=settings.to_dict())

    def _handle_pad_settings(self, payload: dict[str, Any]) -> CommandResult:
        """Global chop pitch, volume and direction"""
        try:
            cmd = PadSettingsCommand(**payload)
        except ValidationError as e:
            return CommandResult.error(f"Invalid pad settings command: {e}")

        settings = self.session.settings
        if cmd.pitch is not None:
            settings.pad_pitch = cmd.pitch
        if cmd.volume is not None:
            settings.pad_volume = percent_to_gain(cmd.volume)
        if cmd.reversed is not None:
            settings.reversed = cmd.reversed
        return CommandResult.ok(data=settings.to_dict())

    # ================================================================
    # Layers and recording
    # ================================================================

    def _begin_layer_take(self, layer_index: int) -> None:
        self.session.layers[layer_index].reset(self.session.settings.synth_waveform)
        self.recorder.begin_layer(layer_index, self._now)

    def _arm(self, layer_index: int) -> None:
        self.session.layers[layer_index].reset(self.session.settings.synth_waveform)
        self.recorder.arm(layer_index)

    def _trigger_armed_recording(self) -> CommandResult:
        """Start playback and capture into the armed layer."""
        layer_index = self.recorder.armed_layer
        if layer_index is None:
            return CommandResult.ok("Not armed")
        result = self._start_playback()
        if not result.success:
            self.recorder.disarm()
            return result
        self.recorder.begin_layer(layer_index, self._now)
        return CommandResult.ok(f"Recording layer {layer_index}")

    def _handle_layer_record(self, payload: dict[str, Any]) -> CommandResult:
        """
        Per-layer record toggle.

        - armed on this layer: disarm
        - recording this layer: finalize
        - otherwise: end any other take, then record now (playing) or arm (stopped)
        """
        try:
            cmd = LayerCommand(**payload)
        except ValidationError as e:
            return CommandResult.error(f"Invalid layer command: {e}")

        if self.recorder.armed_layer == cmd.layer:
            self.recorder.disarm()
            return CommandResult.ok(f"Layer {cmd.layer} disarmed")
        self.recorder.disarm()

        if self.recorder.recording_layer == cmd.layer:
            self.scheduler.finalize_recording()
            return CommandResult.ok(f"Layer {cmd.layer} recorded")
        if self.recorder.is_recording:
            self.scheduler.finalize_recording()

        if self.playing:
            self._begin_layer_take(cmd.layer)
            return CommandResult.ok(f"Recording layer {cmd.layer}")
        self._arm(cmd.layer)
        return CommandResult.ok(f"Layer {cmd.layer} armed")

    def _handle_layer_arm(self, payload: dict[str, Any]) -> CommandResult:
        """Arm a layer: recording starts on the next note-on or play"""
        try:
            cmd = LayerCommand(**payload)
        except ValidationError as e:
            return CommandResult.error(f"Invalid layer command: {e}")

        if self.recorder.is_recording:
            return CommandResult.error("Cannot arm while recording")
        self.recorder.disarm()
        self._arm(cmd.layer)
        return CommandResult.ok(f"Layer {cmd.layer} armed")

    def _handle_layer_clear(self, payload: dict[str, Any]) -> CommandResult:
        try:
            cmd = LayerCommand(**payload)
        except ValidationError as e:
            return CommandResult.error(f"Invalid layer command: {e}")

        if self.recorder.armed_layer == cmd.layer:
            self.recorder.disarm()
        if self.recorder.recording_layer == cmd.layer:
            self.scheduler.finalize_recording()
        self.session.layers[cmd.layer].clear()
        logger.info(f"Layer {cmd.layer} cleared")
        return CommandResult.ok()

    def _handle_layer_mute(self, payload: dict[str, Any]) -> CommandResult:
        """Mute takes effect from the next loop pass; data is kept"""
        try:
            cmd = MuteCommand(**payload)
        except ValidationError as e:
            return CommandResult.error(f"Invalid mute command: {e}")

        layer = self.session.layers[cmd.layer]
        layer.muted = (not layer.muted) if cmd.mute is None else cmd.mute
        logger.debug(f"Layer {cmd.layer} muted={layer.muted}")
        return CommandResult.ok(data={"layer": cmd.layer, "muted": layer.muted})

    def _handle_record(self, payload: dict[str, Any]) -> CommandResult:
        """
        Global record button.

        Finalizes a running take. Otherwise "synth" targets the first empty
        layer (recording now when playing, arming when stopped) and "pads"
        starts playback if needed and captures chop triggers afresh.
        """
        try:
            cmd = RecordCommand(**payload)
        except ValidationError as e:
            return CommandResult.error(f"Invalid record command: {e}")

        if self.recorder.is_recording:
            self.scheduler.finalize_recording()
            return CommandResult.ok("Recording finished")

        if cmd.mode == "synth":
            target = self.session.first_empty_layer()
            self.recorder.disarm()
            if self.playing:
                self._begin_layer_take(target)
                return CommandResult.ok(f"Recording layer {target}", data={"layer": target})
            self._arm(target)
            return CommandResult.ok(f"Layer {target} armed", data={"layer": target})

        self.recorder.disarm()
        result = self._start_playback()
        if not result.success:
            return result
        self.session.pad_recording.clear()
        self.recorder.begin_pads(self._now)
        return CommandResult.ok("Recording pads")

    def _record_event(self, kind: EventKind, frequency: float = 0.0) -> bool:
        """Append a performance transition to the layer being recorded."""
        layer_index = self.recorder.recording_layer
        if layer_index is None or not self.playing:
            return False
        now = self._now
        if self.scheduler.check_recording(now):
            return False
        event = LayerEvent(
            time=self.scheduler.loop_position(now),
            kind=kind,
            frequency=0.0 if kind is EventKind.STOP else frequency,
        )
        self.session.layers[layer_index].append(event)
        return True

    # ================================================================
    # Live performance
    # ================================================================

    def _release_held_note(self) -> bool:
        if self._held_note is None:
            return False
        self._held_note.release(self._now)
        self._held_note = None
        self._record_event(EventKind.STOP)
        return True

    def _handle_note_on(self, payload: dict[str, Any]) -> CommandResult:
        """Start a held note; triggers an armed recording first"""
        try:
            cmd = NoteCommand(**payload)
        except ValidationError as e:
            return CommandResult.error(f"Invalid note command: {e}")

        if self.recorder.is_armed:
            result = self._trigger_armed_recording()
            if not result.success:
                return result
        failure = self._ensure_output()
        if failure is not None:
            return failure

        # Monophonic: a new note ends the held one
        self._release_held_note()

        settings = self.session.settings
        self._held_note = self._sink.start_live_tone(
            settings.synth_waveform, cmd.frequency, self._now, settings.synth_volume
        )
        recorded = self._record_event(EventKind.START, cmd.frequency)
        return CommandResult.ok(data={"recorded": recorded})

    def _handle_note_change(self, payload: dict[str, Any]) -> CommandResult:
        try:
            cmd = NoteCommand(**payload)
        except ValidationError as e:
            return CommandResult.error(f"Invalid note command: {e}")

        if self._held_note is not None:
            self._held_note.add_breakpoint(self._now, cmd.frequency)
        recorded = self._record_event(EventKind.CHANGE, cmd.frequency)
        return CommandResult.ok(data={"recorded": recorded})

    def _handle_note_off(self, payload: dict[str, Any]) -> CommandResult:
        """Release the held note; a STOP is recorded only if a note was sounding"""
        if not self._release_held_note():
            return CommandResult.ok("No note held")
        return CommandResult.ok()

    def _handle_pad(self, payload: dict[str, Any]) -> CommandResult:
        """Play a chop now with the global modifiers and capture it when pad recording"""
        try:
            cmd = PadCommand(**payload)
        except ValidationError as e:
            return CommandResult.error(f"Invalid pad command: {e}")

        try:
            chops = self._chopper.require()
        except NoActiveSample as e:
            return CommandResult.ok(str(e))
        if chops.get(cmd.chop) is None:
            return CommandResult.ok(f"No chop {cmd.chop}")
        failure = self._ensure_output()
        if failure is not None:
            return failure

        now = self._now
        settings = self.session.settings
        self._sink.play_chop(cmd.chop, now, settings.pad_pitch, settings.reversed, settings.pad_volume)
        if self._listener is not None:
            self._listener.on_pad_triggered(cmd.chop)

        recorded = False
        if self.recorder.recording_pads and self.playing and not self.scheduler.check_recording(now):
            self.session.pad_recording.append(PadHit(self.scheduler.loop_position(now), cmd.chop))
            recorded = True
        return CommandResult.ok(data={"recorded": recorded})

    # ================================================================
    # Sampler
    # ================================================================

    def _handle_sequencer_step(self, payload: dict[str, Any]) -> CommandResult:
        try:
            cmd = SequencerStepCommand(**payload)
        except ValidationError as e:
            return CommandResult.error(f"Invalid sequencer command: {e}")

        self.session.pattern.set(cmd.step, cmd.chop)
        return CommandResult.ok(data={"steps": list(self.session.pattern.steps)})

    def _install_sample(self, sample: Sample) -> CommandResult:
        """Replace the chops; pattern and pad recording are kept"""
        chops = self._chopper.load(sample)
        self.session.chops = chops
        logger.info(f"Sample loaded: {sample.name} ({sample.duration:.2f}s)")
        return CommandResult.ok(
            data={
                "name": chops.name,
                "frames": sample.length,
                "duration": sample.duration,
                "chop_frames": chops.chops[0].length,
            }
        )

    def _clear_sample(self) -> CommandResult:
        if self.recorder.recording_pads:
            self.scheduler.finalize_recording()
        self._chopper.clear()
        self.session.chops = None
        self.session.pattern.clear()
        self.session.pad_recording.clear()
        logger.info("Sample cleared")
        return CommandResult.ok()

    # ================================================================
    # Public API Methods
    # ================================================================

    def play(self) -> CommandResult:
        return self._handle_play({})

    def stop_playback(self) -> CommandResult:
        return self._handle_stop({})

    def set_bpm(self, bpm: float) -> CommandResult:
        return self._handle_bpm({"bpm": bpm})

    def set_grid_cell(self, row: int, column: int, active: bool | None = None) -> CommandResult:
        return self._handle_grid_cell({"row": row, "column": column, "active": active})

    def set_row_volume(self, row: int, volume: float) -> CommandResult:
        return self._handle_row_volume({"row": row, "volume": volume})

    def set_synth(self, volume: float | None = None, waveform: str | None = None) -> CommandResult:
        return self._handle_synth({"volume": volume, "waveform": waveform})

    def set_pad_settings(
        self,
        pitch: int | None = None,
        volume: float | None = None,
        reversed: bool | None = None,
    ) -> CommandResult:
        return self._handle_pad_settings({"pitch": pitch, "volume": volume, "reversed": reversed})

    def toggle_layer_record(self, layer: int) -> CommandResult:
        return self._handle_layer_record({"layer": layer})

    def arm_layer(self, layer: int) -> CommandResult:
        return self._handle_layer_arm({"layer": layer})

    def clear_layer(self, layer: int) -> CommandResult:
        return self._handle_layer_clear({"layer": layer})

    def mute_layer(self, layer: int, mute: bool | None = None) -> CommandResult:
        return self._handle_layer_mute({"layer": layer, "mute": mute})

    def record(self, mode: str = "synth") -> CommandResult:
        return self._handle_record({"mode": mode})

    def note_on(self, frequency: float) -> CommandResult:
        return self._handle_note_on({"frequency": frequency})

    def note_change(self, frequency: float) -> CommandResult:
        return self._handle_note_change({"frequency": frequency})

    def note_off(self) -> CommandResult:
        return self._handle_note_off({})

    def trigger_pad(self, chop: int) -> CommandResult:
        return self._handle_pad({"chop": chop})

    def set_sequencer_step(self, step: int, chop: int | None) -> CommandResult:
        return self._handle_sequencer_step({"step": step, "chop": chop})

    def load_sample_bytes(self, raw: bytes, filename: str | None = None) -> CommandResult:
        """
        Public API: Decode and chop a sample synchronously.

        Returns:
            CommandResult; on DecodeFailed the previous sample is kept
        """
        try:
            sample = decode_sample(raw, self._graph.sample_rate, display_name(filename))
        except DecodeFailed as e:
            logger.error(f"Sample decode failed: {e}")
            return CommandResult.error(str(e))
        return self._install_sample(sample)

    async def load_sample(self, raw: bytes, filename: str | None = None) -> CommandResult:
        """Public API: Decode in a worker thread, then install on the loop."""
        try:
            sample = await asyncio.to_thread(
                decode_sample, raw, self._graph.sample_rate, display_name(filename)
            )
        except DecodeFailed as e:
            logger.error(f"Sample decode failed: {e}")
            return CommandResult.error(str(e))
        return self._install_sample(sample)

    def clear_sample(self) -> CommandResult:
        return self._clear_sample()

    def render_export(self, loops: int | None = None) -> RenderResult:
        """Public API: Render the current session offline."""
        return self._renderer.render(self.session, loops)

    async def export_wav(self, loops: int | None = None) -> bytes:
        """
        Public API: Render and encode a WAV in a worker thread.

        The session is snapshotted before leaving the loop, so edits made
        while rendering are not observed.
        """
        snapshot = self.session.snapshot()
        result = await asyncio.to_thread(self._renderer.render, snapshot, loops)
        logger.info(f"Export finished: {result.plan.loops} loop(s), {result.frames} frames")
        return await asyncio.to_thread(result.to_wav)

    # ================================================================
    # Status
    # ================================================================

    def get_status(self) -> dict[str, Any]:
        cursor = self.scheduler.cursor
        clock = self.session.clock
        return {
            "playing": self.playing,
            "output_open": self._output_open,
            "current_beat": cursor.current_beat,
            "loop_duration": clock.loop_duration,
            "loop_position": self.scheduler.loop_position() if self.playing else 0.0,
            "recording": self.recorder.to_dict(),
            "note_held": self._held_note is not None,
            "settings": self.session.settings.to_dict(),
            "grid": self.session.grid.to_dict(),
            "drum_rows": self.session.drum_kit.loaded_rows,
            **self.session.summary(),
            "timing": self.scheduler.get_timing_stats(),
        }

    # ================================================================
    # Main Loop
    # ================================================================

    async def run(self) -> None:
        """
        Scheduler task: tick on a fixed cadence while running.

        Ticks never overlap; a slow tick only delays the next one.
        """
        self._running = True
        bind = getattr(self._timers, "bind", None)
        if bind is not None:
            bind(asyncio.get_running_loop())

        while self._running:
            if self.playing:
                self.scheduler.tick()
            await asyncio.sleep(self._tick_interval)
