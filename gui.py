import tkinter as tk
from tkinter import ttk, messagebox

from data.repository import MockDataRepository
from models.coupon import CouponKind
from services.session_service import StorefrontSession
from utils.errors import StorefrontError
from utils.logger import setup_logger
from utils.money import format_money


class StorefrontApp:
    def __init__(self, root: tk.Tk):
        # core services / data
        self.root = root
        self.root.title("Home Goods Storefront - Operations Console")
        self.root.geometry("960x640")

        self.logger = setup_logger()
        # one session for the whole window; every tab goes through it
        self.session = StorefrontSession(MockDataRepository())
        self.report_service = self.session.reports

        # notebook layout
        self.notebook = ttk.Notebook(self.root)
        self.notebook.pack(fill="both", expand=True)

        self.cart_frame = ttk.Frame(self.notebook)
        self.coupon_center_frame = ttk.Frame(self.notebook)
        self.membership_frame = ttk.Frame(self.notebook)
        self.marketing_frame = ttk.Frame(self.notebook)
        self.orders_frame = ttk.Frame(self.notebook)
        self.report_frame = ttk.Frame(self.notebook)

        self.notebook.add(self.cart_frame, text="Cart & Checkout")
        self.notebook.add(self.coupon_center_frame, text="Coupon Center")
        self.notebook.add(self.membership_frame, text="Membership Ops")
        self.notebook.add(self.marketing_frame, text="Marketing Ops")
        self.notebook.add(self.orders_frame, text="Orders")
        self.notebook.add(self.report_frame, text="Reports")

        self.build_cart_tab()
        self.build_coupon_center_tab()
        self.build_membership_tab()
        self.build_marketing_tab()
        self.build_orders_tab()
        self.build_report_tab()

        self.refresh_all()

    def refresh_all(self):
        # Anything that changes cart, ledger or coupons can change the price,
        # so every view is redrawn from the session after each action.
        self.refresh_products_table()
        self.refresh_cart_table()
        self.refresh_coupon_choices()
        self.refresh_summary()
        self.refresh_coupon_center()
        self.refresh_ledger_card()
        self.refresh_orders_table()
        self.refresh_report()

    def _run(self, action, success: str | None = None):
        try:
            result = action()
        except StorefrontError as e:
            self.logger.exception(f"GUI: action failed: {e}")
            messagebox.showerror("Error", str(e))
            return None
        self.refresh_all()
        if success:
            messagebox.showinfo("Success", success)
        return result

    # TAB 1: CART & CHECKOUT

    def build_cart_tab(self):
        top = ttk.Frame(self.cart_frame)
        top.pack(fill="both", expand=True, padx=10, pady=10)

        shelf = ttk.LabelFrame(top, text="Shelf")
        shelf.pack(side="left", fill="both", expand=True, padx=(0, 5))

        columns = ("id", "name", "price", "stock")
        self.products_tree = ttk.Treeview(shelf, columns=columns, show="headings", height=10)
        for col, text, width in (("id", "ID", 50), ("name", "Name", 180),
                                 ("price", "Price", 80), ("stock", "Stock", 60)):
            self.products_tree.heading(col, text=text)
            self.products_tree.column(col, width=width)
        self.products_tree.pack(fill="both", expand=True, padx=5, pady=5)

        ttk.Button(shelf, text="Add to Cart", command=self.gui_add_to_cart).pack(pady=(0, 5))

        cart_box = ttk.LabelFrame(top, text="Current Cart")
        cart_box.pack(side="left", fill="both", expand=True, padx=(5, 0))

        columns = ("id", "name", "qty", "line")
        self.cart_tree = ttk.Treeview(cart_box, columns=columns, show="headings", height=10)
        for col, text, width in (("id", "ID", 50), ("name", "Name", 160),
                                 ("qty", "Qty", 50), ("line", "Line Total", 90)):
            self.cart_tree.heading(col, text=text)
            self.cart_tree.column(col, width=width)
        self.cart_tree.pack(fill="both", expand=True, padx=5, pady=5)

        btns = ttk.Frame(cart_box)
        btns.pack(pady=(0, 5))
        ttk.Button(btns, text="+", width=3, command=lambda: self.gui_change_qty(1)).pack(side="left", padx=2)
        ttk.Button(btns, text="-", width=3, command=lambda: self.gui_change_qty(-1)).pack(side="left", padx=2)
        ttk.Button(btns, text="Remove", command=self.gui_remove_from_cart).pack(side="left", padx=2)
        ttk.Button(btns, text="Clear", command=lambda: self._run(self.session.clear_cart)).pack(side="left", padx=2)

        bottom = ttk.LabelFrame(self.cart_frame, text="Checkout")
        bottom.pack(fill="x", padx=10, pady=(0, 10))

        ttk.Label(bottom, text="Coupon:").grid(row=0, column=0, sticky="e", padx=5, pady=5)
        self.coupon_choice = ttk.Combobox(bottom, state="readonly", width=40)
        self.coupon_choice.grid(row=0, column=1, sticky="w", padx=5, pady=5)
        self.coupon_choice.bind("<<ComboboxSelected>>", self.gui_select_coupon)

        self.summary_label = ttk.Label(bottom, text="", justify="left")
        self.summary_label.grid(row=1, column=0, columnspan=2, sticky="w", padx=5, pady=5)

        ttk.Button(bottom, text="Checkout Now", command=self.gui_checkout).grid(
            row=0, column=2, rowspan=2, sticky="w", padx=15, pady=5
        )

    def refresh_products_table(self):
        for row in self.products_tree.get_children():
            self.products_tree.delete(row)
        for p in self.session.list_products():
            self.products_tree.insert("", "end", values=(p.id, p.name, format_money(p.price), p.stock))

    def refresh_cart_table(self):
        for row in self.cart_tree.get_children():
            self.cart_tree.delete(row)
        for line in self.session.cart.lines:
            self.cart_tree.insert(
                "",
                "end",
                values=(line.product.id, line.product.name, line.quantity, format_money(line.line_subtotal))
            )

    def refresh_coupon_choices(self):
        eligible = self.session.list_eligible_coupons()
        self._coupon_ids = [None] + [c.id for c in eligible]
        labels = ["(no coupon)"] + [f"{c.id} - {c.title}" for c in eligible]
        self.coupon_choice["values"] = labels
        active = self.session.active_coupon_id
        self.coupon_choice.current(self._coupon_ids.index(active) if active in self._coupon_ids else 0)

    def refresh_summary(self):
        summary = self.session.cart_summary()
        coupon_note = ""
        if summary.selected_coupon_id and summary.applied_coupon_id is None:
            coupon_note = " (minimum spend not reached)"
        self.summary_label.config(text="\n".join([
            f"Subtotal: {format_money(summary.subtotal)}",
            f"Member rate: {summary.member_discount_rate} ({self.session.ledger.tier.value})",
            f"Member savings: -{format_money(summary.member_savings)}",
            f"Coupon savings: -{format_money(summary.coupon_savings)}{coupon_note}",
            f"Pay: {format_money(summary.final_price)}",
        ]))

    def _selected(self, tree: ttk.Treeview) -> str | None:
        sel = tree.selection()
        if not sel:
            messagebox.showerror("Error", "Please select a row first.")
            return None
        return str(tree.item(sel[0], "values")[0])

    def gui_add_to_cart(self):
        product_id = self._selected(self.products_tree)
        if product_id is None:
            return
        self._run(lambda: self.session.add_to_cart(product_id))
        self.logger.info(f"GUI: cart add {product_id}")

    def gui_change_qty(self, delta: int):
        product_id = self._selected(self.cart_tree)
        if product_id is None:
            return
        self._run(lambda: self.session.update_cart_quantity(product_id, delta))

    def gui_remove_from_cart(self):
        product_id = self._selected(self.cart_tree)
        if product_id is None:
            return
        self._run(lambda: self.session.remove_from_cart(product_id))

    def gui_select_coupon(self, _event=None):
        coupon_id = self._coupon_ids[self.coupon_choice.current()]
        self._run(lambda: self.session.apply_coupon_to_cart(coupon_id))

    def gui_checkout(self):
        previous_tier = self.session.ledger.tier
        order = self._run(self.session.checkout)
        if order is None:
            return

        b = order.breakdown
        receipt_lines = [
            f"Order ID: {order.order_id}",
            f"Previous Tier: {previous_tier.value}",
            f"New Tier: {self.session.ledger.tier.value}",
            f"Subtotal: {format_money(b.subtotal)}",
            f"Saved: {format_money(b.total_savings)}",
            f"Total: {format_money(order.total)}",
            "",
            "Items:"
        ]
        for it in order.items:
            receipt_lines.append(
                f"- {it.product_id} x {it.qty} @ {format_money(it.unit_price)} = {format_money(it.subtotal)}"
            )
        messagebox.showinfo("Checkout Complete", "\n".join(receipt_lines))

    # TAB 2: COUPON CENTER

    def build_coupon_center_tab(self):
        frame = ttk.LabelFrame(self.coupon_center_frame, text="Member Coupons")
        frame.pack(fill="both", expand=True, padx=10, pady=10)

        columns = ("id", "title", "offer", "min", "scope", "status")
        self.coupon_tree = ttk.Treeview(frame, columns=columns, show="headings", height=12)
        for col, text, width in (("id", "ID", 60), ("title", "Title", 180), ("offer", "Offer", 90),
                                 ("min", "Min Spend", 90), ("scope", "Scope", 200), ("status", "Status", 90)):
            self.coupon_tree.heading(col, text=text)
            self.coupon_tree.column(col, width=width)
        self.coupon_tree.pack(fill="both", expand=True, padx=5, pady=5)

        ttk.Button(frame, text="Claim Coupon", command=self.gui_claim_coupon).pack(pady=(0, 10))

    def refresh_coupon_center(self):
        for row in self.coupon_tree.get_children():
            self.coupon_tree.delete(row)
        for coupon, locked in self.session.coupon_center():
            if coupon.kind == CouponKind.FIXED_AMOUNT_OFF:
                offer = format_money(coupon.value)
            else:
                offer = f"{(1 - coupon.value) * 100:.0f}% off"
            scope = "all members" if coupon.eligible_tiers is None else \
                ", ".join(sorted(t.value for t in coupon.eligible_tiers))
            status = "locked" if locked else coupon.status.value
            self.coupon_tree.insert(
                "", "end",
                values=(coupon.id, coupon.title, offer, format_money(coupon.minimum_spend), scope, status)
            )

    def gui_claim_coupon(self):
        coupon_id = self._selected(self.coupon_tree)
        if coupon_id is None:
            return
        self._run(lambda: self.session.claim_coupon(coupon_id), success="Claimed successfully.")

    # TAB 3: MEMBERSHIP OPS

    def build_membership_tab(self):
        form = ttk.LabelFrame(self.membership_frame, text="Set Spend")
        form.pack(fill="x", padx=10, pady=10)

        ttk.Label(form, text="Lifetime Spend:").grid(row=0, column=0, sticky="e", padx=5, pady=5)
        ttk.Label(form, text="Annual Spend:").grid(row=1, column=0, sticky="e", padx=5, pady=5)
        self.lifetime_entry = ttk.Entry(form, width=15)
        self.annual_entry = ttk.Entry(form, width=15)
        self.lifetime_entry.grid(row=0, column=1, sticky="w", padx=5, pady=5)
        self.annual_entry.grid(row=1, column=1, sticky="w", padx=5, pady=5)

        ttk.Button(form, text="Apply", command=self.gui_record_spend).grid(row=0, column=2, padx=10, pady=5)
        ttk.Button(form, text="Simulate One Year", command=self.gui_advance_year).grid(
            row=1, column=2, padx=10, pady=5
        )

        card = ttk.LabelFrame(self.membership_frame, text="Member Card")
        card.pack(fill="x", padx=10, pady=(0, 10))
        self.ledger_label = ttk.Label(card, text="", justify="left")
        self.ledger_label.pack(anchor="w", padx=10, pady=10)

    def refresh_ledger_card(self):
        ledger = self.session.ledger
        expiry = ledger.expiry_date.strftime("%Y-%m-%d") if ledger.expiry_date else "-"
        self.ledger_label.config(text="\n".join([
            f"{ledger.name} ({ledger.user_id})",
            f"Tier: {ledger.tier.value}",
            f"Lifetime: {format_money(ledger.lifetime_spend)}",
            f"Annual: {format_money(ledger.annual_spend)}",
            f"Expires: {expiry}",
        ]))
        for entry, value in ((self.lifetime_entry, ledger.lifetime_spend),
                             (self.annual_entry, ledger.annual_spend)):
            entry.delete(0, tk.END)
            entry.insert(0, str(value))

    def gui_record_spend(self):
        lifetime = self.lifetime_entry.get().strip()
        annual = self.annual_entry.get().strip()
        self._run(lambda: self.session.record_spend(lifetime, annual), success="Spend updated.")

    def gui_advance_year(self):
        if not messagebox.askyesno("Confirm", "Simulate one year passing? Paid tiers drop to manager_l1."):
            return
        self._run(self.session.advance_one_year)

    # TAB 4: MARKETING OPS

    def build_marketing_tab(self):
        form = ttk.LabelFrame(self.marketing_frame, text="Create Coupon")
        form.pack(fill="x", padx=10, pady=10)

        self.coupon_entries = {}
        fields = (("id", "ID"), ("title", "Title"), ("description", "Description"),
                  ("value", "Value (50 or 0.88)"), ("minimum_spend", "Minimum Spend"),
                  ("eligible_tiers", "Tiers (comma separated, blank = all)"))
        for row, (key, label) in enumerate(fields):
            ttk.Label(form, text=label + ":").grid(row=row, column=0, sticky="e", padx=5, pady=3)
            entry = ttk.Entry(form, width=30)
            entry.grid(row=row, column=1, sticky="w", padx=5, pady=3)
            self.coupon_entries[key] = entry

        ttk.Label(form, text="Kind:").grid(row=len(fields), column=0, sticky="e", padx=5, pady=3)
        self.coupon_kind = ttk.Combobox(
            form, state="readonly", values=["fixed_amount_off", "percentage_off"], width=27
        )
        self.coupon_kind.current(0)
        self.coupon_kind.grid(row=len(fields), column=1, sticky="w", padx=5, pady=3)

        ttk.Button(form, text="Push To All Users", command=self.gui_push_coupon).grid(
            row=len(fields) + 1, column=1, sticky="w", padx=5, pady=10
        )

    def gui_push_coupon(self):
        data = {key: entry.get().strip() for key, entry in self.coupon_entries.items()}
        tiers = data.pop("eligible_tiers")
        data["eligible_tiers"] = [t.strip() for t in tiers.split(",") if t.strip()]
        data["kind"] = self.coupon_kind.get()
        coupon = self._run(lambda: self.session.push_coupon(data), success="Coupon pushed.")
        if coupon is not None:
            for entry in self.coupon_entries.values():
                entry.delete(0, tk.END)

    # TAB 5: ORDERS

    def build_orders_tab(self):
        frame = ttk.LabelFrame(self.orders_frame, text="Orders")
        frame.pack(fill="both", expand=True, padx=10, pady=10)

        columns = ("order_id", "created", "total", "status", "tracking")
        self.orders_tree = ttk.Treeview(frame, columns=columns, show="headings", height=12)
        for col, text, width in (("order_id", "Order", 110), ("created", "Created", 150),
                                 ("total", "Total", 90), ("status", "Status", 130), ("tracking", "Tracking", 150)):
            self.orders_tree.heading(col, text=text)
            self.orders_tree.column(col, width=width)
        self.orders_tree.pack(fill="both", expand=True, padx=5, pady=5)

        btns = ttk.Frame(frame)
        btns.pack(pady=(0, 10))
        ttk.Button(btns, text="Pay", command=lambda: self._order_action(self.session.pay_order)).pack(side="left", padx=3)
        ttk.Button(btns, text="Ship", command=self.gui_ship_order).pack(side="left", padx=3)
        ttk.Button(btns, text="Confirm Receipt",
                   command=lambda: self._order_action(self.session.confirm_receipt)).pack(side="left", padx=3)
        ttk.Button(btns, text="Refund", command=lambda: self._order_action(self.session.refund_order)).pack(side="left", padx=3)

        ttk.Label(btns, text="Tracking #:").pack(side="left", padx=(15, 3))
        self.tracking_entry = ttk.Entry(btns, width=18)
        self.tracking_entry.pack(side="left")

    def refresh_orders_table(self):
        for row in self.orders_tree.get_children():
            self.orders_tree.delete(row)
        for o in self.session.list_orders():
            self.orders_tree.insert(
                "", "end",
                values=(o.order_id, o.created_at.strftime("%Y-%m-%d %H:%M"), format_money(o.total),
                        o.status.value, o.tracking_number or "")
            )

    def _order_action(self, action):
        order_id = self._selected(self.orders_tree)
        if order_id is None:
            return
        self._run(lambda: action(order_id))

    def gui_ship_order(self):
        tracking = self.tracking_entry.get().strip()
        if not tracking:
            messagebox.showerror("Error", "Please enter a tracking number.")
            return
        self._order_action(lambda order_id: self.session.ship_order(order_id, tracking))
        self.tracking_entry.delete(0, tk.END)

    # TAB 6: REPORTS (revenue, top sellers, low stock)

    def build_report_tab(self):
        frame = ttk.LabelFrame(self.report_frame, text="Sales Summary")
        frame.pack(fill="both", expand=True, padx=10, pady=10)
        self.report_text = tk.Text(frame, height=20, width=80)
        self.report_text.pack(fill="both", expand=True, padx=5, pady=5)

    def refresh_report(self):
        summary = self.report_service.sales_summary()
        lines = [
            f"Revenue (paid orders): {format_money(summary['revenue'])}",
            f"Paid orders: {summary['orders']}",
            "",
            "Top sellers:",
        ]
        lines += [f"  {pid}: {qty} sold" for pid, qty in summary["top5"]] or ["  (none yet)"]
        lines += ["", "Low stock:"]
        lines += [f"  {pid}: {qty} left" for pid, qty in self.report_service.low_stock()] or ["  (none)"]

        self.report_text.config(state="normal")
        self.report_text.delete("1.0", tk.END)
        self.report_text.insert(tk.END, "\n".join(lines))
        self.report_text.config(state="disabled")


def main():
    root = tk.Tk()
    app = StorefrontApp(root)
    root.mainloop()


if __name__ == "__main__":
    main()
