# src/hrtpk/models/one_compartment.py

def one_compartment_first_order(t, y, ka, ke, infusion_mg_per_h=0.0):
    """
    One-compartment model with first-order absorption and elimination.
    Two states:
      y[0] = drug in absorption depot (mg)
      y[1] = drug in central compartment (mg)

    Parameters:
      t                : current time (h)
      y                : current state vector [A_depot, A_central]
      ka               : absorption rate constant (1/h)
      ke               : elimination rate constant (1/h)
      infusion_mg_per_h: zero-order input straight into the central
                         compartment (patch), constant within a segment
    """
    A_depot, A_c = y

    dA_depot_dt = -ka * A_depot
    dA_c_dt = ka * A_depot - ke * A_c + infusion_mg_per_h

    return [dA_depot_dt, dA_c_dt]
