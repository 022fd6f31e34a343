"""New application page — one row of inputs per expense line."""
import gradio as gr

SLOT_FIELDS = ("use_date", "purpose", "line_name", "departure", "arrival", "unit_price", "is_round_trip")


def _slot(index: int) -> dict:
    with gr.Row(visible=False, elem_classes=["ex-entry-row"]) as group:
        use_date = gr.Textbox(label="日付", placeholder="YYYY-MM-DD", max_lines=1, min_width=120)
        purpose = gr.Textbox(label="業務・訪問先", max_lines=1, min_width=160)
        line_name = gr.Textbox(label="利用路線", max_lines=1, min_width=120)
        departure = gr.Textbox(label="区間(出発)", max_lines=1, min_width=100)
        arrival = gr.Textbox(label="区間(到着)", max_lines=1, min_width=100)
        unit_price = gr.Textbox(label="単価", placeholder="0", max_lines=1, min_width=90)
        is_round_trip = gr.Checkbox(label="往復", min_width=60)
        total = gr.Markdown("0 円", elem_classes=["ex-line-total"])
        delete_btn = gr.Button("削除", size="sm", variant="stop", min_width=60)

    return {
        "index": index,
        "group": group,
        "use_date": use_date,
        "purpose": purpose,
        "line_name": line_name,
        "departure": departure,
        "arrival": arrival,
        "unit_price": unit_price,
        "is_round_trip": is_round_trip,
        "total": total,
        "delete_btn": delete_btn,
    }


def build(max_rows: int):
    gr.Markdown("## 新規申請")

    slots = [_slot(i) for i in range(max_rows)]

    with gr.Row():
        add_row_btn = gr.Button("＋ 行を追加", size="sm")
        submit_btn = gr.Button("申請する", variant="primary")

    return {
        "slots": slots,
        "add_row_btn": add_row_btn,
        "submit_btn": submit_btn,
    }
