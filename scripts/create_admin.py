# scripts/create_admin.py

"""
관리자 계정 생성 스크립트.

    python -m scripts.create_admin --name "Admin" --email admin@example.com
"""

import asyncio
import logging

import typer
from pydantic import ValidationError

from app.core.database import AsyncSessionLocal, engine
from app.core.exceptions import ApiError
from app.domains.usr import crud as usr_crud
from app.domains.usr import schemas as usr_schemas
from app.domains.usr.models import UserRole

logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
logger = logging.getLogger("create_admin")

cli = typer.Typer()


async def create_admin_user(user_in: usr_schemas.UserCreate) -> None:
    """
    관리자 사용자를 생성합니다. 이메일이 이미 등록되어 있으면 ConflictError 가 발생합니다.
    """
    try:
        async with AsyncSessionLocal() as db:
            db_user = await usr_crud.user.create(db, obj_in=user_in)
            logger.info("관리자 계정이 생성되었습니다: %s (id=%s)", db_user.email, db_user.id)
    finally:
        await engine.dispose()


@cli.command()
def main(
    name: str = typer.Option(
        "Admin", '--name', '-n',
        prompt="관리자 이름을 입력하세요",
        help="관리자의 이름입니다."
    ),
    email: str = typer.Option(
        ..., '--email', '-e',
        prompt="관리자 이메일을 입력하세요",
        help="로그인 시 사용할 이메일 주소입니다."
    ),
    password: str = typer.Option(
        ..., '--password', '-p',
        prompt="관리자 비밀번호를 입력하세요",
        hide_input=True,
        confirmation_prompt=True,
        help="관리자 계정의 비밀번호입니다. (최소 8자 이상)"
    ),
):
    """
    Sweet Shop 애플리케이션의 관리자(admin) 계정을 생성합니다.
    """
    try:
        user_data = usr_schemas.UserCreate(name=name, email=email, password=password, role=UserRole.ADMIN)
    except ValidationError as e:
        for err in e.errors():
            typer.echo(f"오류: {'.'.join(str(p) for p in err['loc'])}: {err['msg']}", err=True)
        raise typer.Exit(code=1)

    try:
        asyncio.run(create_admin_user(user_data))
    except ApiError as e:
        typer.echo(f"오류: {e.message}", err=True)
        raise typer.Exit(code=1)


if __name__ == "__main__":
    cli()
