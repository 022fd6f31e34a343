"""History page — the current employee's submitted applications."""
import gradio as gr


def build():
    gr.Markdown("## 申請履歴")

    history_html = gr.HTML()

    with gr.Row():
        detail_select = gr.Dropdown(label="申請ID", choices=[], interactive=True, scale=3)
        detail_btn = gr.Button("詳細", size="sm", scale=1)

    return {
        "history_html": history_html,
        "detail_select": detail_select,
        "detail_btn": detail_btn,
    }
