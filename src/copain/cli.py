"""
Copain CLI.

Usage:
    copain add-friend [TARGET]
    copain remove-friend [TARGET]
    copain set-status online|offline
    copain online-friends [OWNER]
    copain show [OWNER]
    copain address [OWNER]
"""

import asyncio
import sys
from typing import Optional

import click
from dotenv import load_dotenv

from copain.application.use_cases.mutation_engine import MutationResult
from copain.config.settings import CopainConfig, load_config
from copain.domain.exceptions import ConfigurationError, CopainException
from copain.domain.value_objects.identity import Identity
from copain.infrastructure.blockchain.session import (
    SocialSession,
    resolve_program_id,
)
from copain.infrastructure.wallet.keypair_loader import (
    load_keypair,
    read_cli_config,
    resolve_payer_path,
    resolve_target,
)
from copain.utils.address import derive_user_state_address


def _build_settings(ctx_obj: dict) -> CopainConfig:
    settings = load_config(ctx_obj.get("config"))
    overrides = {
        key: ctx_obj[key]
        for key in ("solana_rpc_url", "keypair_path", "program_id")
        if ctx_obj.get(key)
    }
    if ctx_obj.get("verbose") is not None:
        overrides["verbose"] = ctx_obj["verbose"]
    if overrides:
        settings = settings.model_copy(update=overrides)
    return settings


def _run(coro) -> None:
    """Run a coroutine, turning domain errors into exit code 1."""
    try:
        asyncio.run(coro)
    except CopainException as e:
        click.echo(f"Error [{e.code}]: {e.message}", err=True)
        sys.exit(1)


def _echo_result(result: MutationResult) -> None:
    if result.submitted:
        click.echo(
            f"{result.operation.name} {result.operation.subject}: "
            f"confirmed ({result.signature})"
        )
    else:
        click.echo(
            f"{result.operation.name} {result.operation.subject}: "
            f"already satisfied, nothing submitted"
        )


def _target(settings: CopainConfig, target: Optional[str]) -> Identity:
    identity = resolve_target(target or settings.target, read_cli_config())
    if identity is None:
        raise ConfigurationError(
            "Missing social dapp target: pass TARGET, set COPAIN_TARGET "
            "or social_dapp_target in the Solana CLI config"
        )
    return identity


@click.group()
@click.option("--config", "-c", default=None, help="Config file")
@click.option("--rpc-url", default=None, help="Cluster RPC URL")
@click.option("--keypair", "-k", default=None, help="Payer keypair path")
@click.option("--program-id", default=None, help="Social program id")
@click.option("--verbose", "-v", type=click.IntRange(0, 3), default=None)
@click.pass_context
def cli(ctx, config, rpc_url, keypair, program_id, verbose):
    """Copain - friend lists and presence on Solana."""
    load_dotenv()
    ctx.ensure_object(dict)
    ctx.obj.update(
        config=config,
        solana_rpc_url=rpc_url,
        keypair_path=keypair,
        program_id=program_id,
        verbose=verbose,
    )


@cli.command("add-friend")
@click.argument("target", required=False)
@click.pass_obj
def add_friend(obj, target):
    """Add TARGET to your friends."""
    settings = _build_settings(obj)

    async def run():
        identity = _target(settings, target)
        async with SocialSession(settings) as session:
            _echo_result(await session.mutation_engine().add_friend(identity))

    _run(run())


@cli.command("remove-friend")
@click.argument("target", required=False)
@click.pass_obj
def remove_friend(obj, target):
    """Remove TARGET from your friends."""
    settings = _build_settings(obj)

    async def run():
        identity = _target(settings, target)
        async with SocialSession(settings) as session:
            _echo_result(await session.mutation_engine().remove_friend(identity))

    _run(run())


@cli.command("set-status")
@click.argument("status", type=click.Choice(["online", "offline"]))
@click.pass_obj
def set_status(obj, status):
    """Set your presence to online or offline."""
    settings = _build_settings(obj)

    async def run():
        async with SocialSession(settings) as session:
            engine = session.mutation_engine()
            _echo_result(await engine.set_online(status == "online"))

    _run(run())


@cli.command("online-friends")
@click.argument("owner", required=False)
@click.pass_obj
def online_friends(obj, owner):
    """List online friends of OWNER (defaults to you)."""
    settings = _build_settings(obj)

    async def run():
        async with SocialSession(settings, require_payer=owner is None) as session:
            friends = await session.online_friends_query().execute(owner)
        if not friends:
            click.echo("No friends online")
        for friend in friends:
            click.echo(friend)

    _run(run())


@cli.command()
@click.argument("owner", required=False)
@click.pass_obj
def show(obj, owner):
    """Show the friend state of OWNER (defaults to you)."""
    settings = _build_settings(obj)

    async def run():
        async with SocialSession(settings, require_payer=owner is None) as session:
            who = Identity(owner) if owner else Identity.from_pubkey(session.payer.pubkey())
            snapshot = await session.reader.read_snapshot(session.reader.address_of(who))
            statuses = await session.online_friends_query().list_friends(who)

        click.echo(f"Identity: {who}")
        click.echo(f"State account: {snapshot.address} ({snapshot.kind.value})")
        click.echo(f"Online: {'yes' if snapshot.state.online else 'no'}")
        click.echo(f"Friends ({len(statuses)}):")
        for status in statuses:
            flag = "online" if status.online else "offline"
            if not status.registered:
                flag += ", no state account"
            click.echo(f"  {status.identity} [{flag}]")

    _run(run())


@cli.command()
@click.argument("owner", required=False)
@click.pass_obj
def address(obj, owner):
    """Print the derived state address of OWNER (defaults to you)."""
    settings = _build_settings(obj)

    try:
        program_id = resolve_program_id(settings)
        if owner:
            who = Identity(owner)
        else:
            path = resolve_payer_path(settings.keypair_path, read_cli_config())
            if not path:
                raise ConfigurationError("No OWNER given and no keypair configured")
            who = Identity.from_pubkey(load_keypair(path).pubkey())
    except CopainException as e:
        click.echo(f"Error [{e.code}]: {e.message}", err=True)
        sys.exit(1)

    derived = derive_user_state_address(who, program_id, settings.state_seed)
    click.echo(str(derived))


def main():
    """Entry point."""
    cli()


if __name__ == "__main__":
    main()
