"""Click CLI — the main entry point for adsb-codec.

Commands:
  adsb-codec decode FILE              Decode a hex frame log and print aircraft table
  adsb-codec simulate                 Generate mock traffic (hex, recording, or decoded table)
  adsb-codec replay FILE --at MS      Rebuild aircraft state at a point of a recording
  adsb-codec encode position|velocity|ident   Synthesize a single frame
  adsb-codec serve                    Launch the decode API
  adsb-codec setup                    Write ~/.adsb-codec/config.yaml
"""

from __future__ import annotations

import logging
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from .capture import FrameReader
from .config import load_config, receiver_reference
from .decoder import MessageCodec
from .frame_parser import is_icao
from .messages import DecodeResult
from .replay import Recorder, Recording, ReplaySession
from .simulator import AdsbSimulator, decode_simulated
from .tracker import Tracker

console = Console()


def _build_codec(ref_lat: float | None, ref_lon: float | None) -> MessageCodec:
    """Codec from config, with CLI flags taking precedence."""
    cfg = load_config()
    codec = MessageCodec(max_pair_age_ms=float(cfg["cpr"]["max_pair_age_ms"]))

    ref = receiver_reference(cfg)
    if ref_lat is not None and ref_lon is not None:
        ref = (ref_lat, ref_lon)
    elif (ref_lat is None) != (ref_lon is None):
        raise click.UsageError("--ref-lat and --ref-lon must be given together")
    if ref is not None:
        codec.set_reference_position(*ref)
    return codec


@click.group()
@click.version_option(version="0.1.0", prog_name="adsb-codec")
@click.option("-v", "--verbose", count=True, help="-v for INFO logging, -vv for DEBUG")
def cli(verbose: int):
    """ADS-B DF17/18 codec — decode, synthesize and replay extended squitters."""
    if verbose:
        logging.basicConfig(
            format="%(levelname)s %(name)s: %(message)s",
            level=logging.DEBUG if verbose >= 2 else logging.INFO,
        )


@cli.command()
@click.argument("file", type=click.Path(exists=True))
@click.option("--ref-lat", type=float, default=None, help="Receiver latitude for local CPR decode")
@click.option("--ref-lon", type=float, default=None, help="Receiver longitude for local CPR decode")
@click.option("--icao", type=str, default=None, help="Address for 14-char ME-only frames")
@click.option("--messages", "show_messages", is_flag=True, help="Print every decoded message")
def decode(file: str, ref_lat: float | None, ref_lon: float | None, icao: str | None,
           show_messages: bool):
    """Decode a hex frame log and print aircraft table."""
    if icao is not None and not is_icao(icao):
        raise click.BadParameter("must be 6 hex characters", param_hint="--icao")
    tracker = Tracker(_build_codec(ref_lat, ref_lon))
    reader = FrameReader(file)

    for raw_frame in reader:
        result = tracker.ingest(raw_frame.hex_str, raw_frame.timestamp, icao=icao)
        if result is not None and show_messages:
            _print_message(result)

    _print_aircraft_table(tracker)
    _print_summary(tracker)
    if reader.skipped:
        console.print(f"  Skipped lines:    {reader.skipped}")


@cli.command()
@click.option("--count", type=int, default=None, help="Number of aircraft")
@click.option("--steps", type=int, default=10, show_default=True, help="Simulation steps")
@click.option("--interval-ms", type=float, default=1000.0, show_default=True, help="Time per step")
@click.option("--center-lat", type=float, default=None, help="Simulation center latitude")
@click.option("--center-lng", type=float, default=None, help="Simulation center longitude")
@click.option("--seed", type=int, default=None, help="Random seed for drift")
@click.option("--compliant", is_flag=True, help="Emit DO-260B frames instead of the demo packing")
@click.option("--output", "-o", type=click.Path(), default=None, help="Write a JSON recording")
@click.option("--table", "show_table", is_flag=True, help="Decode the output and print aircraft table")
def simulate(count: int | None, steps: int, interval_ms: float, center_lat: float | None,
             center_lng: float | None, seed: int | None, compliant: bool, output: str | None,
             show_table: bool):
    """Generate mock traffic around a center point.

    \b
    Examples:
      adsb-codec simulate --count 5 --steps 3            # Print hex frames
      adsb-codec simulate --compliant -o run.json        # Save a recording
      adsb-codec simulate --compliant --table            # Decode and summarize
    """
    sim_cfg = load_config()["simulator"]
    if count is None:
        count = sim_cfg["aircraft_count"]
    if center_lat is None:
        center_lat = sim_cfg["center_lat"]
    if center_lng is None:
        center_lng = sim_cfg["center_lng"]
    if seed is None:
        seed = sim_cfg["seed"]
    if count < 1 or steps < 1:
        raise click.BadParameter("--count and --steps must be at least 1")

    sim = AdsbSimulator(center_lat, center_lng, seed=seed)
    sim.generate_mock_aircraft(count)

    # Simulated clock so recordings are reproducible
    now = [0.0]
    recorder = Recorder(clock=lambda: now[0])
    recorder.start(map_center=(center_lat, center_lng), truth=sim.aircraft)

    tracker = Tracker(MessageCodec())
    for step in range(steps):
        now[0] = step * interval_ms
        for event in sim.generate_all_messages(compliant=compliant):
            recorder.record(event.hex_message)
            if show_table and compliant:
                tracker.ingest(event.hex_message, now[0])
            elif show_table:
                tracker.total_frames += 1
                result = _with_timestamp(decode_simulated(event.hex_message), now[0])
                if result is not None:
                    tracker.update(result)
            elif output is None:
                click.echo(event.hex_message)
        sim.update_positions(interval_ms / 1000.0)

    recording = recorder.stop()
    if output:
        path = recording.save(output)
        console.print(f"[bold]Recording saved:[/] {path} ({recorder.event_count} events)")
    if show_table:
        _print_aircraft_table(tracker)
        _print_summary(tracker)


@cli.command()
@click.argument("file", type=click.Path(exists=True))
@click.option("--at", "at_ms", type=float, default=None, help="Rebuild state up to this time (ms)")
@click.option("--index", type=int, default=None, help="Rebuild state after this many messages")
@click.option("--ref-lat", type=float, default=None, help="Receiver latitude for local CPR decode")
@click.option("--ref-lon", type=float, default=None, help="Receiver longitude for local CPR decode")
def replay(file: str, at_ms: float | None, index: int | None, ref_lat: float | None,
           ref_lon: float | None):
    """Rebuild aircraft state at a point of a recording.

    FILE is a JSON recording or a hex frame log (CSV timestamps honored).
    """
    if at_ms is not None and index is not None:
        raise click.UsageError("Use either --at or --index, not both")

    if Path(file).suffix.lower() == ".json":
        try:
            recording = Recording.load(file)
        except ValueError as e:
            raise click.ClickException(str(e)) from e
    else:
        recording = Recording.from_frames(
            (f.hex_str, f.timestamp) for f in FrameReader(file)
        )

    session = ReplaySession(recording, _build_codec(ref_lat, ref_lon))
    if index is not None:
        tracker = session.seek(index)
    else:
        tracker = session.rebuild(at_ms if at_ms is not None else float("inf"))

    console.print(
        f"[bold]Replay:[/] {session.index}/{len(session.messages)} messages, "
        f"t={session.current_time:.0f} ms"
    )
    _print_aircraft_table(tracker)
    _print_summary(tracker)


@cli.group()
def encode():
    """Synthesize a single DF17 frame."""


@encode.command("position")
@click.argument("icao")
@click.argument("lat", type=float)
@click.argument("lon", type=float)
@click.argument("altitude", type=float)
@click.option("--odd", is_flag=True, help="Odd CPR frame (default even)")
@click.option("--type-code", type=click.IntRange(9, 22), default=11, show_default=True)
@click.option("--gillham", is_flag=True, help="Gillham (Q=0) altitude instead of 25-ft")
@click.option("--df", type=click.Choice(["17", "18"]), default="17", show_default=True)
def encode_position(icao: str, lat: float, lon: float, altitude: float, odd: bool,
                    type_code: int, gillham: bool, df: str):
    """Airborne position frame (TC 9-18 baro, 20-22 GNSS)."""
    _echo_encoded(
        MessageCodec.encode_position, icao, lat, lon, altitude,
        cpr_odd=odd, type_code=type_code, gillham=gillham, df=int(df),
    )


@encode.command("velocity")
@click.argument("icao")
@click.argument("speed", type=float)
@click.argument("heading", type=float)
@click.option("--vrate", type=float, default=None, help="Vertical rate (ft/min)")
@click.option("--airspeed", is_flag=True, help="Airspeed subtype (heading is magnetic)")
@click.option("--ias", is_flag=True, help="With --airspeed: IAS instead of TAS")
@click.option("--supersonic", is_flag=True, help="4-knot resolution subtype")
def encode_velocity(icao: str, speed: float, heading: float, vrate: float | None,
                    airspeed: bool, ias: bool, supersonic: bool):
    """Airborne velocity frame (TC 19)."""
    if airspeed:
        _echo_encoded(
            MessageCodec.encode_airspeed, icao, speed, heading,
            vertical_rate=vrate, tas=not ias, supersonic=supersonic,
        )
    else:
        _echo_encoded(
            MessageCodec.encode_velocity, icao, speed, heading,
            vertical_rate=vrate, supersonic=supersonic,
        )


@encode.command("ident")
@click.argument("icao")
@click.argument("callsign")
@click.option("--category", type=click.IntRange(0, 7), default=0, show_default=True)
@click.option("--type-code", type=click.IntRange(1, 4), default=4, show_default=True)
def encode_ident(icao: str, callsign: str, category: int, type_code: int):
    """Identification frame (TC 1-4)."""
    _echo_encoded(
        MessageCodec.encode_identification, icao, callsign,
        category=category, type_code=type_code,
    )


@cli.command()
@click.option("--host", default=None, help="Host to bind")
@click.option("--port", type=int, default=None, help="Port to bind")
@click.option("--api-key", default="", help="Require this bearer token on POST endpoints")
@click.option("--debug", is_flag=True, help="Enable Flask debug mode")
def serve(host: str | None, port: int | None, api_key: str, debug: bool):
    """Launch the decode API."""
    from .web.app import create_app

    api_cfg = load_config()["api"]
    host = host or api_cfg["host"]
    port = port or api_cfg["port"]

    app = create_app(codec=_build_codec(None, None), api_key=api_key)
    console.print(f"[bold green]adsb-codec API[/] → http://{host}:{port}/api/v1")
    app.run(host=host, port=port, debug=debug)


@cli.command()
def setup():
    """Interactive setup — receiver position, CPR window, API port."""
    from .config import save_config

    console.print("[bold green]adsb-codec setup[/]\n")
    config = load_config()

    console.print("[bold]Step 1:[/] Receiver reference position (used for local CPR decode)")
    name = click.prompt("  Receiver name", default=config["receiver"]["name"])
    lat = click.prompt("  Receiver latitude", default=config["receiver"]["lat"] or "", show_default=False)
    lon = click.prompt("  Receiver longitude", default=config["receiver"]["lon"] or "", show_default=False)

    try:
        lat = float(lat) if lat != "" else None
    except ValueError:
        lat = None
    try:
        lon = float(lon) if lon != "" else None
    except ValueError:
        lon = None

    config["receiver"]["name"] = name
    config["receiver"]["lat"] = lat
    config["receiver"]["lon"] = lon

    console.print("\n[bold]Step 2:[/] Decoder settings")
    config["cpr"]["max_pair_age_ms"] = click.prompt(
        "  Max even/odd pair age (ms)", default=config["cpr"]["max_pair_age_ms"], type=int
    )
    config["api"]["port"] = click.prompt("  API port", default=config["api"]["port"], type=int)

    path = save_config(config)
    console.print(f"\n[bold]Config saved:[/] {path}")


def _with_timestamp(result: DecodeResult | None, timestamp: float) -> DecodeResult | None:
    if result is None:
        return None
    return DecodeResult(icao=result.icao, data=result.data, timestamp=timestamp)


def _echo_encoded(encoder, *args, **kwargs) -> None:
    try:
        click.echo(encoder(*args, **kwargs))
    except ValueError as e:
        raise click.BadParameter(str(e)) from e


def _print_message(result: DecodeResult) -> None:
    row = result.to_dict()
    console.print(f"  [cyan]{row['icao']}[/] {row['type'] or '-'} {row['data'] or ''}")


def _print_aircraft_table(tracker: Tracker):
    """Print Rich table of all tracked aircraft."""
    table = Table(title="Aircraft")
    table.add_column("ICAO", style="cyan")
    table.add_column("Callsign")
    table.add_column("Lat", justify="right")
    table.add_column("Lon", justify="right")
    table.add_column("Alt (ft)", justify="right")
    table.add_column("Speed", justify="right")
    table.add_column("Hdg", justify="right")
    table.add_column("VRate", justify="right")
    table.add_column("NIC", justify="right")
    table.add_column("Msgs", justify="right")

    for ac in sorted(tracker.aircraft.values(), key=lambda a: a.message_count, reverse=True):
        table.add_row(
            ac.icao,
            ac.callsign or "-",
            f"{ac.lat:.4f}" if ac.lat is not None else "-",
            f"{ac.lng:.4f}" if ac.lng is not None else "-",
            str(ac.altitude) if ac.altitude is not None else "-",
            f"{ac.speed:.0f}" if ac.speed is not None else "-",
            f"{ac.heading:.0f}°" if ac.heading is not None else "-",
            str(ac.vertical_rate) if ac.vertical_rate is not None else "-",
            str(ac.nic) if ac.nic is not None else "-",
            str(ac.message_count),
        )

    console.print(table)


def _print_summary(tracker: Tracker):
    """Print decode summary."""
    console.print(f"\n[bold]Summary:[/]")
    console.print(f"  Total frames:     {tracker.total_frames}")
    console.print(f"  Valid frames:     {tracker.valid_frames}")
    console.print(f"  Position decodes: {tracker.position_decodes}")
    console.print(f"  Aircraft seen:    {len(tracker.aircraft)}")
