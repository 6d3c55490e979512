# Table processors applied after reconciliation
