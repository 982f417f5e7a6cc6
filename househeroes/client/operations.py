"""GraphQL documents for the named operations the client sends."""

FAMILY_FIELDS = "id name createdAt"
USER_FIELDS = "id email firstName lastName role familyId createdAt lastLoginAt"
TASK_FIELDS = """
    id familyId title description createdById dueDate createdAt isCompleted completedAt
    assignees { id firstName lastName }
"""

GET_FAMILIES = f"""
query GetFamilies {{
  families {{ {FAMILY_FIELDS} }}
}}
"""

GET_USERS = f"""
query GetUsers {{
  users {{ {USER_FIELDS} }}
}}
"""

GET_TASKS = f"""
query GetTasks($filter: TaskFilterInput, $order: [TaskSortInput!]) {{
  tasks(filter: $filter, order: $order) {{ {TASK_FIELDS} }}
}}
"""

GET_TASK_ASSIGNMENTS = """
query GetTaskAssignments {
  taskAssignments { taskId userId }
}
"""

GET_MY_FAMILY = f"""
query GetMyFamily {{
  myFamily {{ {FAMILY_FIELDS} members {{ {USER_FIELDS} }} }}
}}
"""

GET_MY_TASKS = f"""
query GetMyTasks($filter: TaskFilterInput, $order: [TaskSortInput!]) {{
  myTasks(filter: $filter, order: $order) {{ {TASK_FIELDS} }}
}}
"""

GET_FAMILY_MEMBERS = f"""
query GetFamilyMembers {{
  familyMembers {{ {USER_FIELDS} }}
}}
"""

GET_CURRENT_USER = f"""
query GetCurrentUser {{
  currentUser {{ {USER_FIELDS} }}
}}
"""

GET_TASK_BY_ID = f"""
query GetTaskById($id: UUID!) {{
  taskById(id: $id) {{ {TASK_FIELDS} }}
}}
"""

CREATE_FAMILY = f"""
mutation CreateFamily($input: CreateFamilyInput!) {{
  createFamily(input: $input) {{ {FAMILY_FIELDS} }}
}}
"""

CREATE_USER = f"""
mutation CreateUser($input: CreateUserInput!) {{
  createUser(input: $input) {{ {USER_FIELDS} }}
}}
"""

CREATE_TASK = f"""
mutation CreateTask($input: CreateTaskInput!) {{
  createTask(input: $input) {{ {TASK_FIELDS} }}
}}
"""

ASSIGN_TASK = """
mutation AssignTask($input: AssignTaskInput!) {
  assignTask(input: $input) { taskId userId }
}
"""

COMPLETE_TASK = f"""
mutation CompleteTask($taskId: UUID!) {{
  completeTask(taskId: $taskId) {{ {TASK_FIELDS} }}
}}
"""

DELETE_TASK = """
mutation DeleteTask($taskId: UUID!) {
  deleteTask(taskId: $taskId)
}
"""

SIGN_IN = f"""
mutation SignIn {{
  signIn {{ {USER_FIELDS} }}
}}
"""

REGISTER_NEW_USER = f"""
mutation RegisterNewUser($input: RegisterNewUserInput!) {{
  registerNewUser(input: $input) {{
    success
    message
    user {{ {USER_FIELDS} }}
    family {{ {FAMILY_FIELDS} }}
  }}
}}
"""
