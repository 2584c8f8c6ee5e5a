from pydantic import BaseModel, Field


class User(BaseModel):
    name: str = ""
    username: str


class UserCollection(BaseModel):
    nodes: list[User] = Field(default_factory=list)


class Pipeline(BaseModel):
    status: str = ""


class Discussion(BaseModel):
    resolvable: bool = False
    resolved: bool = False


class DiscussionCollection(BaseModel):
    nodes: list[Discussion] = Field(default_factory=list)


class MergeRequest(BaseModel):
    title: str
    author: User
    createdAt: str
    mergeStatus: str = ""
    approvedBy: UserCollection = Field(default_factory=UserCollection)
    # Merge requests without CI have no head pipeline
    headPipeline: Pipeline | None = None
    webUrl: str
    discussions: DiscussionCollection = Field(default_factory=DiscussionCollection)

    @property
    def pipeline_status(self) -> str:
        return self.headPipeline.status if self.headPipeline else ""


class PageInfo(BaseModel):
    endCursor: str | None = None
    hasNextPage: bool = False


class MergeRequestCollection(BaseModel):
    count: int = 0
    nodes: list[MergeRequest] = Field(default_factory=list)
    pageInfo: PageInfo = Field(default_factory=PageInfo)


class Group(BaseModel):
    id: str
    name: str
    mergeRequests: MergeRequestCollection = Field(
        default_factory=MergeRequestCollection
    )
