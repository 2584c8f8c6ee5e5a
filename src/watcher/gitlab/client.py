import requests

from watcher.shared.consts import GITLAB_GRAPHQL_PATH, GITLAB_PAGE_SIZE
from watcher.shared.decorators import retry_on_fail
from watcher.shared.exceptions import GitLabError

from . import logger
from .models import Group

GROUP_MERGE_REQUESTS_QUERY = """
query($groupPath: ID!, $labels: [String!], $first: Int!, $cursor: String) {
  group(fullPath: $groupPath) {
    id
    name
    mergeRequests(labels: $labels, first: $first, sort: created_desc, after: $cursor) {
      count
      nodes {
        title
        author {
          name
          username
        }
        createdAt
        mergeStatus
        approvedBy {
          nodes {
            username
          }
        }
        headPipeline {
          status
        }
        webUrl
        discussions {
          nodes {
            resolvable
            resolved
          }
        }
      }
      pageInfo {
        endCursor
        hasNextPage
      }
    }
  }
}
"""


class GitLabClient:
    def __init__(
        self,
        url: str,
        token: str,
        timeout: float = 30,
    ):
        self.endpoint = url.rstrip("/") + GITLAB_GRAPHQL_PATH
        self.token = token
        self.timeout = timeout

    @retry_on_fail(max_retries=3, sleep_interval=10)
    def query(
        self,
        query: str,
        variables: dict,
    ) -> dict:
        headers = {
            "Authorization": f"Bearer {self.token}",
            "Content-Type": "application/json",
        }

        res = requests.post(
            self.endpoint,
            headers=headers,
            json={"query": query, "variables": variables},
            timeout=self.timeout,
        )
        res.raise_for_status()

        payload: dict = res.json()
        if payload.get("errors"):
            raise GitLabError(payload["errors"])

        return payload["data"]

    def list_group_merge_requests(
        self,
        group_path: str,
        label: str | None = None,
    ) -> Group:
        """Fetch every merge request of the group, following pagination."""
        variables = {
            "groupPath": group_path,
            "labels": [label] if label else None,
            "first": GITLAB_PAGE_SIZE,
            "cursor": None,
        }

        group: Group | None = None
        while True:
            data = self.query(GROUP_MERGE_REQUESTS_QUERY, variables)
            if data.get("group") is None:
                raise GitLabError([{"message": f"Group not found: {group_path}"}])

            page = Group.model_validate(data["group"])
            if group is None:
                group = page
            else:
                group.mergeRequests.nodes.extend(page.mergeRequests.nodes)

            logger.debug(
                f"Fetched {len(group.mergeRequests.nodes)}/{page.mergeRequests.count} merge requests"
            )

            if not page.mergeRequests.pageInfo.hasNextPage:
                break
            variables = {**variables, "cursor": page.mergeRequests.pageInfo.endCursor}

        return group
