"""Github repository stats example.

This example demonstrates how to fetch typed results from a JSON API with
mwrequest, using the asyncio client.

Run with:

python app.py stealthrocket coroutine

"""

import asyncio
import logging
import sys
from typing import List, Optional

import pydantic

from mwrequest import AsyncClient, HTTPError

logger = logging.getLogger(__name__)

GITHUB_API_URL = "https://api.github.com"


class RepoInfo(pydantic.BaseModel):
    full_name: str
    stargazers_count: int
    watchers_count: int
    forks_count: int
    contributors_url: str


class Contributor(pydantic.BaseModel):
    login: str
    contributions: int


async def get_repo_info(client: AsyncClient, repo_owner: str, repo_name: str):
    url = f"{GITHUB_API_URL}/repos/{repo_owner}/{repo_name}"
    return await client.get(url, output=RepoInfo)


async def get_contributors(client: AsyncClient, repo_info: RepoInfo):
    return await client.get(
        repo_info.contributors_url, {"per_page": "100"}, output=List[Contributor]
    )


async def main(
    repo_owner: str, repo_name: str, client: Optional[AsyncClient] = None
) -> List[str]:
    client = client or AsyncClient(headers={"Accept": "application/vnd.github+json"})
    async with client:
        try:
            repo_info = await get_repo_info(client, repo_owner, repo_name)
        except HTTPError as e:
            if e.status_code == 403:
                logger.warning("rate limit exceeded")
            raise
        print(
            f"""Repository: {repo_info.full_name}
Stars: {repo_info.stargazers_count}
Watchers: {repo_info.watchers_count}
Forks: {repo_info.forks_count}"""
        )

        contributors = await get_contributors(client, repo_info)
        print(f"Contributors: {len(contributors)}")
        return [c.login for c in contributors]


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    owner, name = sys.argv[1:3]
    asyncio.run(main(owner, name))
