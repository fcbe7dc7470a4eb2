"""密码模块：系统钥匙串查询，找不到时交互输入并保存"""

import asyncio
import getpass
import logging

import keyring

from .models import PasswordStatement

logger = logging.getLogger("browser_script.credentials")

PASSWORD_PROMPT = "Enter the password: "


class CredentialNotFound(LookupError):
    """钥匙串中没有对应条目"""

    def __init__(self, account: str, service: str):
        self.account = account
        self.service = service
        super().__init__(f"钥匙串中没有 account={account!r} service={service!r}")


class KeyringStore:
    """基于 keyring 的安全凭据存储"""

    async def get(self, account: str, service: str) -> str:
        secret = await asyncio.to_thread(keyring.get_password, service, account)
        if secret is None:
            raise CredentialNotFound(account, service)
        return secret

    async def set(self, account: str, service: str, secret: str):
        await asyncio.to_thread(keyring.set_password, service, account, secret)


class TerminalPrompter:
    """在控制终端上读取一行；secret=True 时不回显"""

    async def ask(self, question: str, secret: bool = True) -> str:
        reader = getpass.getpass if secret else input
        return await asyncio.to_thread(reader, question)


async def resolve_password(statement: PasswordStatement, session) -> str:
    """
    先查钥匙串；只有“找不到”时才提示输入，并把输入写回钥匙串。
    其他错误原样抛出，由执行器按单步失败处理。
    """
    account, service, name = statement.account, statement.service, statement.name

    try:
        secret = await session.credentials.get(account, service)
    except CredentialNotFound:
        logger.info("no stored secret for %s@%s, prompting", account, service)
        secret = await session.prompter.ask(PASSWORD_PROMPT)
        await session.credentials.set(account, service, secret)

    session.vars[name] = secret
    return secret
