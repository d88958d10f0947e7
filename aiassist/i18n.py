"""
Localized UI strings.

Lookup by key; unknown languages fall back to English and unknown keys
are returned as-is so a missing translation never crashes the session.
"""

from __future__ import annotations

LANGUAGE_ENGLISH = "en"
LANGUAGE_CHINESE = "zh"

ENGLISH_MESSAGES: dict[str, str] = {
    # Config
    "config.not_found": "✗ Configuration file not found: {}",
    "config.hint_edit": "Please create or edit the config file: ~/.aiassist/config.yaml",
    "config.invalid": "✗ Invalid configuration: {}",

    # Interactive mode
    "interactive.welcome": "Welcome to AI Shell Assistant",
    "interactive.help_hint": "Type 'help' for built-in commands, Ctrl+C to exit",
    "interactive.input_prompt": "Please enter your question",
    "interactive.goodbye": "Goodbye!",
    "interactive.thinking": "Thinking",
    "interactive.continue_analysis": (
        "Based on the complete conversation history and the executed command output above, "
        "please continue with the next steps of analysis and diagnosis, listing the remaining "
        "steps and commands."
    ),
    "interactive.executed_command": "Executed Command",
    "interactive.execution_output": "Execution Output",
    "interactive.execution_error": "Execution Error",
    "interactive.user_label": "User",
    "interactive.ai_label": "AI",
    "interactive.analysis_complete": "✓ Analysis complete, please continue with questions",
    "interactive.pipe_user_question": "User question: ",
    "interactive.pipe_data": "Pipe output data:",
    "interactive.history_empty": "No conversation history yet",
    "interactive.history_title": "Conversation History",
    "interactive.help_title": "Built-in Commands",
    "interactive.help_help": "Show this help",
    "interactive.help_history": "Show the conversation history",
    "interactive.help_status": "Show model availability",
    "interactive.help_clear": "Clear the screen",
    "interactive.help_exit": "Exit the assistant",
    "interactive.help_question": "Any other text is sent to the model as a question",

    # Executor
    "executor.query_command": "Query command:",
    "executor.modify_command": "Modify command (requires confirmation):",
    "executor.execute_prompt": "Execute this command?",
    "executor.modify_warning": "Warning: This command will modify server configuration, are you sure?",
    "executor.cancelled": "Cancelled",
    "executor.execute_success": "✓ Execution successful",
    "executor.execute_failed": "✗ Execution failed: {}",
    "executor.no_output": "(Command executed successfully, but no output)",
    "executor.max_depth_reached": (
        "Warning: Maximum command analysis depth reached ({}). "
        "Stopping to prevent infinite recursion."
    ),
    "executor.blacklisted": (
        "✗ Command rejected: This command matches blacklist rule '{}', execution forbidden"
    ),
    "executor.blacklist_hint": (
        "To execute this command, please contact the administrator for permission "
        "or modify the blacklist configuration"
    ),

    # Output truncation
    "output.truncated": "omitted {} lines of output",

    # Errors
    "error.no_models": "✗ Error: No models configured",
    "error.general": "✗ Error: {}",

    # Models
    "llm.status_title": "Model Status",
    "llm.status_model": "Model",
    "llm.status_state": "State",
    "llm.status_available": "available",
    "llm.status_unavailable": "unavailable (rate limited)",
    "llm.status_disabled": "disabled",
    "llm.status_default": "(default)",
    "llm.provider_failed": "Warning: {} failed, trying next model: {}",

    # Version / sysinfo
    "version.app_name": "AI Shell Assistant (aiassist)",
    "version.version": "Version: {}",
    "sysinfo.collect_failed": "Warning: failed to load system info: {}",
    "sysinfo.cache_file": "Cache file: {}",
}

CHINESE_MESSAGES: dict[str, str] = {
    "config.not_found": "✗ 配置文件不存在: {}",
    "config.hint_edit": "请创建或编辑配置文件: ~/.aiassist/config.yaml",
    "config.invalid": "✗ 配置无效: {}",

    "interactive.welcome": "欢迎使用 AI Shell Assistant",
    "interactive.help_hint": "输入 'help' 查看内置命令, 按 Ctrl+C 退出",
    "interactive.input_prompt": "请输入问题",
    "interactive.goodbye": "再见！",
    "interactive.thinking": "思考中",
    "interactive.continue_analysis": (
        "根据以上完整的对话历史和已执行的命令输出，请继续进行接下来的分析和诊断，列出剩余的步骤和命令。"
    ),
    "interactive.executed_command": "执行命令",
    "interactive.execution_output": "执行输出",
    "interactive.execution_error": "执行错误",
    "interactive.user_label": "用户",
    "interactive.ai_label": "AI",
    "interactive.analysis_complete": "✓ 所有分析已完成，请继续提问",
    "interactive.pipe_user_question": "用户问题: ",
    "interactive.pipe_data": "管道输出数据:",
    "interactive.history_empty": "暂无会话历史",
    "interactive.history_title": "会话历史",
    "interactive.help_title": "内置命令",
    "interactive.help_help": "显示帮助",
    "interactive.help_history": "显示会话历史",
    "interactive.help_status": "显示模型状态",
    "interactive.help_clear": "清屏",
    "interactive.help_exit": "退出",
    "interactive.help_question": "其他任何输入都会作为问题发送给模型",

    "executor.query_command": "查询命令:",
    "executor.modify_command": "修改命令 (需要确认):",
    "executor.execute_prompt": "是否执行此命令?",
    "executor.modify_warning": "警告: 此命令将修改服务器配置, 确定执行吗?",
    "executor.cancelled": "已取消",
    "executor.execute_success": "✓ 执行成功",
    "executor.execute_failed": "✗ 执行失败: {}",
    "executor.no_output": "(命令执行成功，但没有输出)",
    "executor.max_depth_reached": "警告: 已达到最大命令分析深度 ({})，停止以防止无限循环。",
    "executor.blacklisted": "✗ 命令被拒绝: 该命令匹配黑名单规则 '{}'，禁止执行",
    "executor.blacklist_hint": "如需执行此命令，请联系管理员获取权限或修改黑名单配置",

    "output.truncated": "已省略 {} 行输出",

    "error.no_models": "✗ 错误: 未配置任何模型",
    "error.general": "✗ 错误: {}",

    "llm.status_title": "模型状态",
    "llm.status_model": "模型",
    "llm.status_state": "状态",
    "llm.status_available": "可用",
    "llm.status_unavailable": "不可用 (限流)",
    "llm.status_disabled": "已禁用",
    "llm.status_default": "(默认)",
    "llm.provider_failed": "警告: {} 调用失败, 尝试下一个模型: {}",

    "version.app_name": "AI Shell Assistant (aiassist)",
    "version.version": "版本: {}",
    "sysinfo.collect_failed": "警告: 加载系统信息失败: {}",
    "sysinfo.cache_file": "缓存文件: {}",
}

MESSAGES: dict[str, dict[str, str]] = {
    LANGUAGE_ENGLISH: ENGLISH_MESSAGES,
    LANGUAGE_CHINESE: CHINESE_MESSAGES,
}


class Translator:
    """Resolves message keys for one language."""

    def __init__(self, language: str = LANGUAGE_ENGLISH) -> None:
        self.language = language if language in MESSAGES else LANGUAGE_ENGLISH

    def t(self, key: str, *args: object) -> str:
        message = MESSAGES[self.language].get(key) or ENGLISH_MESSAGES.get(key)
        if message is None:
            return key
        return message.format(*args) if args else message
