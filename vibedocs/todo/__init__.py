"""
Todo 模块：TODO 解析、进度计算与进度匹配

- parser：从 TODO_MASTER / 扩展 todo 文档中解析任务
- progress：由 Todo 列表派生项目进度（纯函数）
- matcher：把用户描述的工作内容匹配到候选 Todo
"""

from vibedocs.todo.schemas import ProtoTodo, TodoItem

__all__ = ["ProtoTodo", "TodoItem"]
