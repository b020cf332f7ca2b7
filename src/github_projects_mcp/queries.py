"""Static GraphQL documents, one per operation."""

from __future__ import annotations

PROJECT_FIELDS_FRAGMENT = """
fragment ProjectSummary on ProjectV2 {
  id
  number
  title
  shortDescription
  url
  public
  closed
  template
  createdAt
  updatedAt
  creator {
    login
  }
}
"""

FIELD_CONFIGURATION_FRAGMENT = """
fragment FieldConfiguration on ProjectV2FieldConfiguration {
  __typename
  ... on ProjectV2Field {
    id
    name
    dataType
  }
  ... on ProjectV2SingleSelectField {
    id
    name
    dataType
    options {
      id
      name
      color
      description
    }
  }
  ... on ProjectV2IterationField {
    id
    name
    dataType
    configuration {
      duration
      startDay
      iterations {
        id
        title
        startDate
        duration
      }
    }
  }
}
"""

# Repositories

GET_REPOSITORY = """
query GetRepository($owner: String!, $name: String!) {
  repository(owner: $owner, name: $name) {
    id
    name
    nameWithOwner
    description
    url
    homepageUrl
    primaryLanguage {
      name
    }
    isPrivate
    isFork
    isArchived
    isTemplate
    stargazerCount
    forkCount
    watchers {
      totalCount
    }
    openIssues: issues(states: OPEN) {
      totalCount
    }
    defaultBranchRef {
      name
    }
    licenseInfo {
      name
      spdxId
    }
    createdAt
    updatedAt
    pushedAt
  }
}
"""

# Issues

GET_ISSUE = """
query GetIssue($owner: String!, $name: String!, $number: Int!) {
  repository(owner: $owner, name: $name) {
    issue(number: $number) {
      id
      number
      title
      body
      state
      url
      createdAt
      updatedAt
      closedAt
      author {
        login
        url
      }
      assignees(first: 20) {
        nodes {
          login
          url
        }
      }
      labels(first: 50) {
        nodes {
          name
          color
        }
      }
      milestone {
        number
        title
        dueOn
        state
      }
      comments {
        totalCount
      }
    }
  }
}
"""

# Projects: reads

GET_PROJECT = (
    """
query GetProject($id: ID!) {
  node(id: $id) {
    ... on ProjectV2 {
      ...ProjectSummary
    }
  }
}
"""
    + PROJECT_FIELDS_FRAGMENT
)

LIST_PROJECTS = (
    """
query ListProjects($login: String!, $first: Int!, $after: String) {
  repositoryOwner(login: $login) {
    __typename
    ... on User {
      projectsV2(first: $first, after: $after) {
        ...ProjectPage
      }
    }
    ... on Organization {
      projectsV2(first: $first, after: $after) {
        ...ProjectPage
      }
    }
  }
}

fragment ProjectPage on ProjectV2Connection {
  totalCount
  pageInfo {
    hasNextPage
    endCursor
  }
  nodes {
    ...ProjectSummary
  }
}
"""
    + PROJECT_FIELDS_FRAGMENT
)

GET_PROJECT_COLUMNS = """
query GetProjectColumns($id: ID!) {
  node(id: $id) {
    ... on ProjectV2 {
      fields(first: 50) {
        nodes {
          ... on ProjectV2SingleSelectField {
            id
            name
            options {
              id
              name
              color
              description
            }
          }
        }
      }
    }
  }
}
"""

GET_PROJECT_FIELDS = (
    """
query GetProjectFields($id: ID!) {
  node(id: $id) {
    ... on ProjectV2 {
      fields(first: 50) {
        nodes {
          ...FieldConfiguration
        }
      }
    }
  }
}
"""
    + FIELD_CONFIGURATION_FRAGMENT
)

GET_PROJECT_ITEMS = """
query GetProjectItems($id: ID!, $first: Int!, $after: String) {
  node(id: $id) {
    ... on ProjectV2 {
      items(first: $first, after: $after) {
        totalCount
        pageInfo {
          hasNextPage
          endCursor
        }
        nodes {
          id
          type
          isArchived
          createdAt
          updatedAt
          fieldValues(first: 20) {
            nodes {
              __typename
              ... on ProjectV2ItemFieldTextValue {
                text
                field { ... on ProjectV2FieldCommon { id name } }
              }
              ... on ProjectV2ItemFieldNumberValue {
                number
                field { ... on ProjectV2FieldCommon { id name } }
              }
              ... on ProjectV2ItemFieldDateValue {
                date
                field { ... on ProjectV2FieldCommon { id name } }
              }
              ... on ProjectV2ItemFieldSingleSelectValue {
                name
                optionId
                field { ... on ProjectV2FieldCommon { id name } }
              }
              ... on ProjectV2ItemFieldIterationValue {
                title
                iterationId
                startDate
                duration
                field { ... on ProjectV2FieldCommon { id name } }
              }
            }
          }
          content {
            __typename
            ... on Issue {
              id
              number
              title
              state
              url
              repository { nameWithOwner }
            }
            ... on PullRequest {
              id
              number
              title
              state
              url
              repository { nameWithOwner }
            }
            ... on DraftIssue {
              id
              title
              body
            }
          }
        }
      }
    }
  }
}
"""

# Projects: item mutations

ADD_PROJECT_ITEM = """
mutation AddProjectItem($input: AddProjectV2ItemByIdInput!) {
  addProjectV2ItemById(input: $input) {
    item {
      id
    }
  }
}
"""

UPDATE_ITEM_FIELD_VALUE = """
mutation UpdateProjectItemField($input: UpdateProjectV2ItemFieldValueInput!) {
  updateProjectV2ItemFieldValue(input: $input) {
    projectV2Item {
      id
    }
  }
}
"""

CLEAR_ITEM_FIELD_VALUE = """
mutation ClearProjectItemFieldValue($input: ClearProjectV2ItemFieldValueInput!) {
  clearProjectV2ItemFieldValue(input: $input) {
    projectV2Item {
      id
    }
  }
}
"""

ADD_DRAFT_ISSUE = """
mutation AddDraftIssue($input: AddProjectV2DraftIssueInput!) {
  addProjectV2DraftIssue(input: $input) {
    projectItem {
      id
      content {
        ... on DraftIssue {
          id
          title
          body
        }
      }
    }
  }
}
"""

CONVERT_DRAFT_ISSUE = """
mutation ConvertDraftIssue($input: ConvertProjectV2DraftIssueItemToIssueInput!) {
  convertProjectV2DraftIssueItemToIssue(input: $input) {
    item {
      id
      content {
        ... on Issue {
          id
          number
          title
          url
        }
      }
    }
  }
}
"""

UPDATE_ITEM_POSITION = """
mutation UpdateItemPosition($input: UpdateProjectV2ItemPositionInput!) {
  updateProjectV2ItemPosition(input: $input) {
    items(first: 100) {
      nodes {
        id
      }
    }
  }
}
"""

DELETE_PROJECT_ITEM = """
mutation DeleteProjectItem($input: DeleteProjectV2ItemInput!) {
  deleteProjectV2Item(input: $input) {
    deletedItemId
  }
}
"""

ARCHIVE_PROJECT_ITEM = """
mutation ArchiveProjectItem($input: ArchiveProjectV2ItemInput!) {
  archiveProjectV2Item(input: $input) {
    item {
      id
      isArchived
    }
  }
}
"""

UNARCHIVE_PROJECT_ITEM = """
mutation UnarchiveProjectItem($input: UnarchiveProjectV2ItemInput!) {
  unarchiveProjectV2Item(input: $input) {
    item {
      id
      isArchived
    }
  }
}
"""

# Projects: project mutations

CREATE_PROJECT = (
    """
mutation CreateProject($input: CreateProjectV2Input!) {
  createProjectV2(input: $input) {
    projectV2 {
      ...ProjectSummary
    }
  }
}
"""
    + PROJECT_FIELDS_FRAGMENT
)

UPDATE_PROJECT = (
    """
mutation UpdateProject($input: UpdateProjectV2Input!) {
  updateProjectV2(input: $input) {
    projectV2 {
      ...ProjectSummary
    }
  }
}
"""
    + PROJECT_FIELDS_FRAGMENT
)

DELETE_PROJECT = """
mutation DeleteProject($input: DeleteProjectV2Input!) {
  deleteProjectV2(input: $input) {
    projectV2 {
      id
      title
    }
  }
}
"""

COPY_PROJECT = (
    """
mutation CopyProject($input: CopyProjectV2Input!) {
  copyProjectV2(input: $input) {
    projectV2 {
      ...ProjectSummary
    }
  }
}
"""
    + PROJECT_FIELDS_FRAGMENT
)

MARK_PROJECT_AS_TEMPLATE = """
mutation MarkProjectAsTemplate($input: MarkProjectV2AsTemplateInput!) {
  markProjectV2AsTemplate(input: $input) {
    projectV2 {
      id
      title
      template
    }
  }
}
"""

UNMARK_PROJECT_AS_TEMPLATE = """
mutation UnmarkProjectAsTemplate($input: UnmarkProjectV2AsTemplateInput!) {
  unmarkProjectV2AsTemplate(input: $input) {
    projectV2 {
      id
      title
      template
    }
  }
}
"""

UPDATE_PROJECT_STATUS = """
mutation UpdateProjectStatus($input: UpdateProjectV2StatusUpdateInput!) {
  updateProjectV2StatusUpdate(input: $input) {
    statusUpdate {
      id
      body
      status
      startDate
      targetDate
      updatedAt
    }
  }
}
"""

# Projects: field mutations

CREATE_PROJECT_FIELD = (
    """
mutation CreateProjectField($input: CreateProjectV2FieldInput!) {
  createProjectV2Field(input: $input) {
    projectV2Field {
      ...FieldConfiguration
    }
  }
}
"""
    + FIELD_CONFIGURATION_FRAGMENT
)

UPDATE_PROJECT_FIELD = (
    """
mutation UpdateProjectField($input: UpdateProjectV2FieldInput!) {
  updateProjectV2Field(input: $input) {
    projectV2Field {
      ...FieldConfiguration
    }
  }
}
"""
    + FIELD_CONFIGURATION_FRAGMENT
)

DELETE_PROJECT_FIELD = (
    """
mutation DeleteProjectField($input: DeleteProjectV2FieldInput!) {
  deleteProjectV2Field(input: $input) {
    projectV2Field {
      ...FieldConfiguration
    }
  }
}
"""
    + FIELD_CONFIGURATION_FRAGMENT
)
