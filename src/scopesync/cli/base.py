import asyncio
import dataclasses
from typing import Optional

import click
import numpy as np
import simplejson as json
from loguru import logger

from scopesync.acq import derive_signal_display
from scopesync.device.gateway import DeviceGateway
from scopesync.device.mock_device import run_mock_device
from scopesync.session import ScopeSession
from scopesync.sinks import LogRenderSink, LogStatusSink
from scopesync.types import (
    ACQUISITION_PRESETS,
    SIGNAL_PRESETS,
    AcqMode,
    CommsError,
    WaveformType,
    find_preset,
)
from scopesync.util import (
    DEFAULT_HOST_ADDR,
    ClientProfile,
    list_profiles,
    load_profile,
    profiles_default_path,
    shutdown_client_log,
    start_client_log,
)


def print_tree(cmd, prefix="", parent_ctx=None):
    """Print command tree starting from given command."""
    ctx = click.Context(cmd, info_name=cmd.name, parent=parent_ctx)

    # Only print root name if no parent
    if not parent_ctx:
        click.echo(cmd.name)

    for sub in sorted(cmd.list_commands(ctx)):
        sub_cmd = cmd.get_command(ctx, sub)
        click.echo(f"{prefix}└── {sub}")
        if isinstance(sub_cmd, click.Group):
            print_tree(sub_cmd, prefix + "    ", ctx)


def tree_option(f):
    """Add --tree option to command."""

    def callback(ctx, param, value):
        if not value or ctx.resilient_parsing:
            return
        print_tree(ctx.command)
        ctx.exit()

    return click.option(
        "--tree",
        is_flag=True,
        help="Show command tree from this point",
        expose_value=False,
        is_eager=True,
        callback=callback,
    )(f)


def connection_options(f):
    """Options selecting the device: a profile, optionally overridden."""
    f = click.option(
        "--timeout", "-t", type=float, default=None, help="Request timeout (s)"
    )(f)
    f = click.option("--port", "-p", type=int, default=None, help="Device port")(f)
    f = click.option("--host", "-ha", default=None, help="Device address")(f)
    f = click.option(
        "--profiles-file",
        type=click.Path(dir_okay=False),
        default=None,
        help=f"Profiles INI file (default: {profiles_default_path()})",
    )(f)
    f = click.option(
        "--profile", "-P", default="default", help="Connection profile name"
    )(f)
    return f


def resolve_profile(
    profile: str,
    profiles_file: Optional[str],
    host: Optional[str],
    port: Optional[int],
    timeout: Optional[float],
) -> ClientProfile:
    try:
        prof = load_profile(profile, profiles_file)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--profile")
    overrides = {
        k: v
        for k, v in (("host", host), ("port", port), ("timeout", timeout))
        if v is not None
    }
    return dataclasses.replace(prof, **overrides)


def make_gateway(prof: ClientProfile) -> DeviceGateway:
    return DeviceGateway(prof.base_url, timeout=prof.timeout)


def run_device_call(prof: ClientProfile, func):
    """Run `func(gateway)` once against the device; CommsError -> exit 1."""

    async def _run():
        async with make_gateway(prof) as gw:
            return await func(gw)

    try:
        return asyncio.run(_run())
    except CommsError as e:
        raise click.ClickException(f"Device error: {e}")


def echo_json(obj):
    click.echo(json.dumps(obj, indent=2))


@click.group()
@tree_option
def cli():
    """scopesync - control and telemetry client for an ADC sampler with a
    signal generator.

    - Continuous or snapshot polling of six-channel sample frames

    - Acquisition and signal-generator configuration

    - A mock device for development and testing
    """
    pass


# --------------------------------------------------------------------------------------
# monitor
# --------------------------------------------------------------------------------------


async def run_monitor(
    prof: ClientProfile, snapshot: bool, duration: float, plot: bool
) -> None:
    if plot:
        from scopesync.sinks.mpl import MplRenderSink

        render_sink = MplRenderSink()
    else:
        render_sink = LogRenderSink()
    status_sink = LogStatusSink()
    mode = AcqMode.SNAPSHOT if snapshot else AcqMode.CONTINUOUS

    async with make_gateway(prof) as gw:
        session = ScopeSession(gw, render_sink, status_sink, mode=mode)
        await session.start()
        try:
            if duration > 0:
                await asyncio.sleep(duration)
            else:
                await asyncio.Event().wait()  # until cancelled (Ctrl-C)
        finally:
            await session.stop()
            render_sink.close()


@cli.command()
@connection_options
@click.option(
    "--plot/--no-plot", default=None, help="Live matplotlib plot (default: profile)"
)
@click.option(
    "--snapshot", is_flag=True, help="Start in snapshot mode (no automatic capture)"
)
@click.option(
    "--duration",
    "-d",
    type=float,
    default=0.0,
    help="Stop after this many seconds (default: run until interrupted)",
)
@click.option(
    "--log-to-file/--no-log-to-file",
    "-ltf/",
    default=None,
    help="Enable/disable logging to file (default: profile)",
)
@click.option(
    "--log-to-stdout/--no-log-to-stdout",
    "-lts/",
    default=None,
    help="Enable/disable console logging (default: profile)",
)
@click.option("--log-path", "-lp", default=None, help="Custom path for log file")
@click.option(
    "--log-level",
    "-ll",
    default=None,
    help="Logging level (TRACE, DEBUG, INFO, WARNING, ERROR) (default: profile)",
)
def monitor(
    profile,
    profiles_file,
    host,
    port,
    timeout,
    plot,
    snapshot,
    duration,
    log_to_file,
    log_to_stdout,
    log_path,
    log_level,
):
    """Poll a device and show its frames and status until interrupted."""
    prof = resolve_profile(profile, profiles_file, host, port, timeout)
    start_client_log(
        log_to_file=prof.log_to_file if log_to_file is None else log_to_file,
        log_to_stdout=prof.log_to_stdout if log_to_stdout is None else log_to_stdout,
        log_path=prof.log_path if log_path is None else log_path,
        log_level=(log_level or prof.log_level).upper(),
    )
    logger.info("Monitoring {} (profile '{}')", prof.base_url, prof.name)
    try:
        asyncio.run(
            run_monitor(
                prof,
                snapshot=snapshot,
                duration=duration,
                plot=prof.plot if plot is None else plot,
            )
        )
    except KeyboardInterrupt:
        logger.info("Interrupted.")
    finally:
        shutdown_client_log()


# --------------------------------------------------------------------------------------
# mock device
# --------------------------------------------------------------------------------------


@cli.command()
@click.option("--host-address", "-ha", default=DEFAULT_HOST_ADDR, help="Bind address")
@click.option("--port", "-p", default=8080, type=int, help="Bind port (default: 8080)")
@click.option("--log-level", "-ll", default="INFO", help="Logging level")
def mock(host_address, port, log_level):
    """Serve a mock device with synthetic waveforms."""
    start_client_log(log_to_file=False, log_to_stdout=True, log_level=log_level)
    run_mock_device(host=host_address, port=port)


# --------------------------------------------------------------------------------------
# one-shot device commands
# --------------------------------------------------------------------------------------


@cli.command()
@connection_options
def capture(profile, profiles_file, host, port, timeout):
    """Fetch one frame and print a per-channel summary."""
    prof = resolve_profile(profile, profiles_file, host, port, timeout)
    payload = run_device_call(prof, lambda gw: gw.fetch_samples())
    channels = payload.get("channels") if isinstance(payload, dict) else None
    if not isinstance(channels, list):
        raise click.ClickException("Device returned no channel data.")
    summary = {}
    for i, ch in enumerate(channels):
        try:
            arr = np.asarray(ch, dtype=float)
        except (TypeError, ValueError):
            summary[f"CH{i + 1}"] = "malformed"
            continue
        summary[f"CH{i + 1}"] = {
            "samples": int(arr.size),
            "min": float(arr.min()) if arr.size else None,
            "max": float(arr.max()) if arr.size else None,
            "mean": round(float(arr.mean()), 1) if arr.size else None,
        }
    echo_json(summary)


@cli.group()
def config():
    """Device acquisition settings."""
    pass


@config.command("get")
@connection_options
def config_get(profile, profiles_file, host, port, timeout):
    """Print the device's acquisition settings."""
    prof = resolve_profile(profile, profiles_file, host, port, timeout)
    settings = run_device_call(prof, lambda gw: gw.fetch_acquisition_config())
    echo_json(settings.to_dict())


@config.command("set")
@connection_options
@click.option("--num-samples", type=click.IntRange(min=1), default=None)
@click.option("--sample-rate", type=click.IntRange(min=1), default=None, help="µs")
@click.option("--channel-delay", type=click.IntRange(min=0), default=None)
@click.option("--capture-interval", type=click.IntRange(min=1), default=None, help="ms")
@click.option("--web-update", type=click.IntRange(min=1), default=None, help="ms")
@click.option("--preset", default=None, help="Start from a named preset")
def config_set(profile, profiles_file, host, port, timeout, preset, **fields):
    """Change acquisition settings. Unspecified fields keep their current value."""
    prof = resolve_profile(profile, profiles_file, host, port, timeout)
    changes = {k: v for k, v in fields.items() if v is not None}

    async def _apply(gw: DeviceGateway):
        if preset is not None:
            base = find_preset(ACQUISITION_PRESETS, preset).settings
        else:
            base = await gw.fetch_acquisition_config()
        settings = dataclasses.replace(base, **changes)
        await gw.apply_acquisition_config(settings)
        return settings

    try:
        settings = run_device_call(prof, _apply)
    except KeyError as e:
        raise click.BadParameter(str(e), param_hint="--preset")
    echo_json(settings.to_dict())


@cli.group()
def signal():
    """Signal generator control."""
    pass


@signal.command("status")
@connection_options
def signal_status(profile, profiles_file, host, port, timeout):
    """Print the generator's live status."""
    prof = resolve_profile(profile, profiles_file, host, port, timeout)
    status = run_device_call(prof, lambda gw: gw.fetch_signal_status())
    display = derive_signal_display(status)
    click.echo(f"{display.state_text}: {display.label}")


@signal.command("get")
@connection_options
def signal_get(profile, profiles_file, host, port, timeout):
    """Print the generator's settings."""
    prof = resolve_profile(profile, profiles_file, host, port, timeout)
    settings = run_device_call(prof, lambda gw: gw.fetch_signal_config())
    echo_json(settings.to_dict())


@signal.command("set")
@connection_options
@click.option(
    "--waveform",
    type=click.Choice([w.name for w in WaveformType], case_sensitive=False),
    default=None,
)
@click.option("--amplitude", type=click.IntRange(0, 255), default=None)
@click.option("--frequency", type=click.IntRange(min=0), default=None, help="Hz")
@click.option("--duty-cycle", type=click.IntRange(0, 100), default=None, help="%")
@click.option("--dc-offset", type=click.IntRange(0, 255), default=None)
@click.option("--pulse-width-ms", type=click.IntRange(min=0), default=None)
@click.option("--preset", default=None, help="Start from a named preset")
def signal_set(profile, profiles_file, host, port, timeout, waveform, preset, **fields):
    """Change generator settings. Unspecified fields keep their current value."""
    prof = resolve_profile(profile, profiles_file, host, port, timeout)
    changes = {k: v for k, v in fields.items() if v is not None}
    if waveform is not None:
        changes["waveform_type"] = WaveformType[waveform.upper()].value

    async def _apply(gw: DeviceGateway):
        base = await gw.fetch_signal_config()
        if preset is not None:
            base = find_preset(SIGNAL_PRESETS, preset).resolve(base)
        settings = dataclasses.replace(base, **changes)
        await gw.apply_signal_config(settings)
        return settings

    try:
        settings = run_device_call(prof, _apply)
    except KeyError as e:
        raise click.BadParameter(str(e), param_hint="--preset")
    echo_json(settings.to_dict())


@signal.command("toggle")
@connection_options
def signal_toggle(profile, profiles_file, host, port, timeout):
    """Turn the generator on/off."""
    prof = resolve_profile(profile, profiles_file, host, port, timeout)
    enabled = run_device_call(prof, lambda gw: gw.toggle_signal())
    click.echo("Signal ON" if enabled else "Signal OFF")


@signal.command("pulse")
@connection_options
def signal_pulse(profile, profiles_file, host, port, timeout):
    """Fire a single pulse."""
    prof = resolve_profile(profile, profiles_file, host, port, timeout)
    run_device_call(prof, lambda gw: gw.send_single_pulse())
    click.echo("Single pulse sent")


# --------------------------------------------------------------------------------------
# local information
# --------------------------------------------------------------------------------------


@cli.command()
def presets():
    """List acquisition and signal presets."""
    click.echo("Acquisition presets:")
    for i, p in enumerate(ACQUISITION_PRESETS):
        s = p.settings
        click.echo(
            f"  [{i}] {p.name}: {s.num_samples} samples, {s.sample_rate}µs, "
            f"delay {s.channel_delay}, capture {s.capture_interval} ms, "
            f"update {s.web_update} ms"
        )
    click.echo("Signal presets:")
    for i, p in enumerate(SIGNAL_PRESETS):
        click.echo(
            f"  [{i}] {p.name}: {WaveformType(p.waveform_type).label}, "
            f"amplitude {p.amplitude}, {p.frequency}Hz, duty {p.duty_cycle}%, "
            f"offset {p.dc_offset}"
        )


@cli.group()
def profile():
    """Connection profiles."""
    pass


@profile.command("list")
@click.option("--profiles-file", type=click.Path(dir_okay=False), default=None)
def profile_list(profiles_file):
    """List profiles in the profiles file."""
    names = list_profiles(profiles_file)
    if not names:
        click.echo(f"No profiles in {profiles_file or profiles_default_path()}")
    for name in names:
        click.echo(name)


@profile.command("show")
@click.argument("name", default="default")
@click.option("--profiles-file", type=click.Path(dir_okay=False), default=None)
def profile_show(name, profiles_file):
    """Show one profile, with defaults filled in."""
    try:
        prof = load_profile(name, profiles_file)
    except ValueError as e:
        raise click.ClickException(str(e))
    echo_json(dataclasses.asdict(prof))
