"""Login and signup screens"""

import logging

from eth_account import Account

from errors import AppError, NotFoundError
from handlers.common import AppContext
from models import Credentials
from states import Failed, Login, MainMenu, Next, Signup, Transition
from utils import parse_private_key

logger = logging.getLogger(__name__)


async def login(screen: Login, ctx: AppContext) -> Transition:
    """Ask for the operator key and open a session"""
    raw_key = await ctx.prompter.ask_text("Enter your private key to login")
    if raw_key is None:
        return Next(Login())

    try:
        credentials = Credentials(parse_private_key(raw_key))
    except AppError as e:
        return Failed(Login(), e)

    api = await ctx.api()
    try:
        token = await ctx.loader("logging in").interact(api.authenticate(credentials.signer))
    except NotFoundError:
        return Next(Signup(credentials))
    except AppError as e:
        logger.error(f"Login failed for {credentials.address}: {e}")
        return Failed(Login(), e)

    try:
        user = await ctx.loader("loading user").interact(api.fetch_current_user(token))
    except AppError as e:
        return Failed(Login(), e)

    await ctx.store.set_token(token)
    await ctx.store.set_user(user)
    logger.info(f"Logged in as {user.address}")
    return Next(MainMenu())


async def signup(screen: Signup, ctx: AppContext) -> Transition:
    """Offer to create an account for a key the service does not know"""
    credentials = screen.credentials
    create_user = await ctx.prompter.confirm(
        f"Unable to find account for {credentials.address} would you like to create one?",
        default=True,
    )
    if not create_user:
        return Next(Login())

    new_signer = Account.create()
    api = await ctx.api()
    try:
        await ctx.loader("creating user").interact(api.register(credentials.signer, new_signer))
    except AppError as e:
        return Failed(Signup(credentials), e)

    try:
        token = await ctx.loader("logging in").interact(api.authenticate(credentials.signer))
        user = await ctx.loader("loading user").interact(api.fetch_current_user(token))
    except AppError as e:
        return Failed(Login(), e)

    await ctx.store.set_token(token)
    await ctx.store.set_user(user)
    logger.info(f"Created account {user.address}")
    return Next(MainMenu())
