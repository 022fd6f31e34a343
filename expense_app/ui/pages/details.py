"""Application detail overlay."""
import gradio as gr


def build():
    with gr.Group(visible=False, elem_classes=["ex-modal"]) as modal:
        gr.Markdown("### 申請詳細")
        header_html = gr.HTML()
        lines_html = gr.HTML()
        total_html = gr.HTML()
        close_btn = gr.Button("閉じる", size="sm")

    return {
        "modal": modal,
        "header_html": header_html,
        "lines_html": lines_html,
        "total_html": total_html,
        "close_btn": close_btn,
    }
