"""Login page — employee code lookup."""
import gradio as gr

from expense_core import config


def build():
    gr.Markdown(f"# {config.APP_TITLE}")
    gr.Markdown("従業員コードを入力してログインしてください。")

    emp_code = gr.Textbox(label="従業員コード", placeholder="例: E0001", max_lines=1)
    login_btn = gr.Button("ログイン", variant="primary")
    login_msg = gr.HTML()

    return {
        "emp_code": emp_code,
        "login_btn": login_btn,
        "login_msg": login_msg,
    }
