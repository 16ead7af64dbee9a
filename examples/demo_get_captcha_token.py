import asyncio
import os

from suno_captcha import AgentConfig, Identity, get_captcha_token, init_log

init_log(runtime="logs/runtime.log", error="logs/error.log", serialize="logs/serialize.log")


def on_new_token(token: str):
    # Persist the refreshed bearer credential of the account
    print(f"new auth token: {token[:16]}...")


async def main():
    identity = Identity(
        user_agent=os.environ["SUNO_USER_AGENT"],
        session_token=os.environ["SUNO_SESSION"],
        cookies={"__client": os.getenv("SUNO_CLIENT")},
    )
    agent_config = AgentConfig(BROWSER_HEADLESS=False, BROWSER_GHOST_CURSOR=True)

    token = await get_captcha_token(identity, on_new_token, agent_config)
    print(token)


if __name__ == "__main__":
    asyncio.run(main())
